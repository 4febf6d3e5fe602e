from __future__ import annotations

from typing import Any, List, Optional

import httpx

from datastore.series import DataPoint, Series, TimeSeriesError


class GraphiteClient:
    """Queries the Graphite render API."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"), timeout=timeout, transport=transport
        )

    def close(self) -> None:
        self._client.close()

    def query(self, start: str, end: str, target: str) -> List[Series]:
        params = {"target": target, "from": start, "until": end, "format": "json"}
        try:
            response = self._client.get("/render", params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            raise TimeSeriesError(f"Graphite query for {target!r} failed: {exc}") from exc
        except ValueError as exc:
            raise TimeSeriesError(f"Graphite returned invalid JSON for {target!r}.") from exc
        return self._parse(payload)

    @staticmethod
    def _parse(payload: Any) -> List[Series]:
        if not isinstance(payload, list):
            raise TimeSeriesError("Unexpected Graphite response payload.")
        results: List[Series] = []
        for entry in payload:
            if not isinstance(entry, dict):
                raise TimeSeriesError("Unexpected Graphite series entry.")
            points: List[DataPoint] = []
            # Graphite orders each point as [value, timestamp].
            for raw in entry.get("datapoints") or []:
                try:
                    value, timestamp = raw
                except (TypeError, ValueError) as exc:
                    raise TimeSeriesError(f"Malformed Graphite datapoint {raw!r}.") from exc
                points.append(
                    DataPoint(
                        timestamp=int(timestamp),
                        value=None if value is None else float(value),
                    )
                )
            results.append(Series(target=str(entry.get("target", "")), datapoints=points))
        return results
