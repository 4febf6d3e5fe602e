from __future__ import annotations

from typing import Iterable

from datastore.graphite import GraphiteClient
from datastore.memory_series import InMemorySeries
from services.alerts import HttpAlertSink, LoggingAlertSink
from services.engine import build_default_engine, build_default_series, build_default_sink
from settings import get_settings


def _clear_caches(caches: Iterable) -> None:
    for cache in caches:
        cache.cache_clear()


def test_defaults(monkeypatch) -> None:
    for name in (
        "WEATHER_WINDY_THRESHOLD",
        "WEATHER_DIGEST_HOUR",
        "GRAPHITE_URL",
        "ALERT_SINK_URL",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()

    try:
        settings = get_settings()
        assert settings.windy_threshold == 8.0
        assert settings.digest_hour == 8
        assert settings.graphite_url is None
        assert settings.log_level == "INFO"
        assert isinstance(build_default_series(), InMemorySeries)
        assert isinstance(build_default_sink(), LoggingAlertSink)
    finally:
        get_settings.cache_clear()


def test_environment_overrides_apply(monkeypatch) -> None:
    monkeypatch.setenv("WEATHER_TEMP_DEVICE", "temp.garden")
    monkeypatch.setenv("WEATHER_WINDY_THRESHOLD", "12.5")
    monkeypatch.setenv("WEATHER_DIGEST_SENSOR", "patio.temp")
    monkeypatch.setenv("WEATHER_DIGEST_HOUR", "7")
    monkeypatch.setenv("GRAPHITE_URL", "http://graphite.local")
    monkeypatch.setenv("ALERT_SINK_URL", "http://bus.local/publish")
    monkeypatch.setenv("ALERT_TARGET", "mastodon")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    caches = (get_settings, build_default_engine)
    _clear_caches(caches)

    try:
        settings = get_settings()
        assert settings.temp_device == "temp.garden"
        assert settings.digest_hour == 7
        assert settings.log_level == "DEBUG"

        engine = build_default_engine()
        assert engine.detector.windy_threshold == 12.5
        assert engine.digest.sensor == "patio.temp"
        assert isinstance(engine.digest.source, GraphiteClient)
        assert isinstance(engine.sink, HttpAlertSink)
        assert engine.sink.target == "mastodon"
    finally:
        _clear_caches(caches)


def test_invalid_values_fall_back_to_defaults(monkeypatch) -> None:
    monkeypatch.setenv("WEATHER_WINDY_THRESHOLD", "-3")
    monkeypatch.setenv("WEATHER_DIGEST_HOUR", "25")
    monkeypatch.setenv("WEATHER_RAIN_DEVICE", "   ")
    monkeypatch.setenv("GRAPHITE_URL", "")
    get_settings.cache_clear()

    try:
        settings = get_settings()
        assert settings.windy_threshold == 8.0
        assert settings.digest_hour == 8
        assert settings.rain_device == "rain.outside"
        assert settings.graphite_url is None
    finally:
        get_settings.cache_clear()
