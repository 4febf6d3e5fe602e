from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_RAIN_DEVICE_ENV = "WEATHER_RAIN_DEVICE"
_TEMP_DEVICE_ENV = "WEATHER_TEMP_DEVICE"
_WIND_DEVICE_ENV = "WEATHER_WIND_DEVICE"
_WINDY_THRESHOLD_ENV = "WEATHER_WINDY_THRESHOLD"
_DIGEST_SENSOR_ENV = "WEATHER_DIGEST_SENSOR"
_DIGEST_HOUR_ENV = "WEATHER_DIGEST_HOUR"
_GRAPHITE_URL_ENV = "GRAPHITE_URL"
_ALERT_SINK_URL_ENV = "ALERT_SINK_URL"
_ALERT_TARGET_ENV = "ALERT_TARGET"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    rain_device: str
    temp_device: str
    wind_device: str
    windy_threshold: float
    digest_sensor: str
    digest_hour: int
    graphite_url: Optional[str]
    alert_sink_url: Optional[str]
    alert_target: str
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_windy_threshold(default: float) -> float:
    value = os.getenv(_WINDY_THRESHOLD_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_digest_hour(default: int) -> int:
    value = os.getenv(_DIGEST_HOUR_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if 0 <= parsed <= 23 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        rain_device=_read_str_env(_RAIN_DEVICE_ENV, "rain.outside"),
        temp_device=_read_str_env(_TEMP_DEVICE_ENV, "temp.outside"),
        wind_device=_read_str_env(_WIND_DEVICE_ENV, "wind.outside"),
        windy_threshold=_read_windy_threshold(8.0),
        digest_sensor=_read_str_env(_DIGEST_SENSOR_ENV, "garden.temp"),
        digest_hour=_read_digest_hour(8),
        graphite_url=_read_optional_env(_GRAPHITE_URL_ENV, None),
        alert_sink_url=_read_optional_env(_ALERT_SINK_URL_ENV, None),
        alert_target=_read_str_env(_ALERT_TARGET_ENV, "twitter"),
        log_level=_read_log_level("INFO"),
    )
