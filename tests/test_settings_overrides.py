from __future__ import annotations

import asyncio
from typing import Iterable

from services.dashboard import build_default_service
from settings import get_settings
from storage.sun_cache import build_default_cache


def _clear_caches(caches: Iterable) -> None:
    for cache in caches:
        cache.cache_clear()


def test_defaults_without_environment(monkeypatch) -> None:
    for name in (
        "SMARTCITIZEN_API_URL",
        "DEFAULT_DEVICE_ID",
        "HISTORY_WINDOW_DAYS",
        "TODAY_LIST_DAYS",
        "SUN_CACHE_MAX_ENTRIES",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()

    try:
        settings = get_settings()
        assert settings.api_url == "https://api.smartcitizen.me/v0"
        assert settings.default_device_id == "19225"
        assert settings.history_window_days == 30
        assert settings.today_list_days == 5
        assert settings.sun_cache_max_entries is None
        assert settings.log_level == "INFO"
    finally:
        get_settings.cache_clear()


def test_environment_overrides_apply(monkeypatch) -> None:
    monkeypatch.setenv("SMARTCITIZEN_API_URL", "https://mirror.test/v0/")
    monkeypatch.setenv("DEFAULT_DEVICE_ID", "19226")
    monkeypatch.setenv("HISTORY_WINDOW_DAYS", "14")
    monkeypatch.setenv("TODAY_LIST_DAYS", "3")
    monkeypatch.setenv("SUN_CACHE_MAX_ENTRIES", "64")
    monkeypatch.setenv("DISPLAY_TIMEZONE", "UTC")

    caches = (get_settings, build_default_cache, build_default_service)
    _clear_caches(caches)

    service = build_default_service()
    try:
        assert get_settings().default_device_id == "19226"
        assert service.client.api_url == "https://mirror.test/v0"
        assert service.history_days == 14
        assert service.today_list_days == 3
        assert service.client.cache.max_entries == 64
        assert str(service.client.display_timezone) == "UTC"
    finally:
        asyncio.run(service.aclose())
        _clear_caches(caches)


def test_invalid_values_fall_back_to_defaults(monkeypatch) -> None:
    monkeypatch.setenv("HISTORY_WINDOW_DAYS", "-3")
    monkeypatch.setenv("TODAY_LIST_DAYS", "many")
    monkeypatch.setenv("HTTP_TIMEOUT", "0")
    monkeypatch.setenv("SUN_CACHE_MAX_ENTRIES", "")
    monkeypatch.setenv("LOG_LEVEL", " debug ")
    get_settings.cache_clear()

    try:
        settings = get_settings()
        assert settings.history_window_days == 30
        assert settings.today_list_days == 5
        assert settings.http_timeout == 10.0
        assert settings.sun_cache_max_entries is None
        assert settings.log_level == "DEBUG"
    finally:
        get_settings.cache_clear()
