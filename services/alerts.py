"""Outbound alert delivery.

Sinks own deduplication: an alert carries a subtopic and a suppression
interval and the receiving side decides whether to forward it.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol

import httpx

from models.records import AlertMessage

logger = logging.getLogger(__name__)


class AlertDeliveryError(RuntimeError):
    """Raised when an alert could not be handed to the sink."""


class AlertSink(Protocol):
    def send(self, message: AlertMessage) -> None:
        ...


class LoggingAlertSink:
    """Writes alerts to the log; used when no event bus is configured."""

    def __init__(self, target: str = "twitter") -> None:
        self.target = target

    def send(self, message: AlertMessage) -> None:
        logger.info(
            "Alert: %s",
            message.text,
            extra={"target": self.target, "subtopic": message.subtopic, "interval": message.interval},
        )


class HttpAlertSink:
    """Publishes alerts as ``alert`` events on the event bus HTTP endpoint."""

    def __init__(
        self,
        url: str,
        target: str = "twitter",
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.url = url
        self.target = target
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def send(self, message: AlertMessage) -> None:
        logger.info(
            "Sending alert %s",
            message.text,
            extra={"target": self.target, "subtopic": message.subtopic},
        )
        payload = {
            "topic": "alert",
            "message": message.text,
            "target": self.target,
            "subtopic": message.subtopic,
            "interval": message.interval,
        }
        try:
            response = self._client.post(self.url, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise AlertDeliveryError(f"Failed to publish alert to {self.url}: {exc}") from exc


class RecordingAlertSink:
    """Keeps alerts in memory, for the CLI dry run and tests."""

    def __init__(self) -> None:
        self.messages: List[AlertMessage] = []

    def send(self, message: AlertMessage) -> None:
        self.messages.append(message)
