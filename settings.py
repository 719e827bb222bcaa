from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_API_URL_ENV = "SMARTCITIZEN_API_URL"
_SUN_API_URL_ENV = "SUN_API_URL"
_DEFAULT_DEVICE_ENV = "DEFAULT_DEVICE_ID"
_TIMEZONE_ENV = "DISPLAY_TIMEZONE"
_COUNTRY_ENV = "DEFAULT_COUNTRY"
_TIMEOUT_ENV = "HTTP_TIMEOUT"
_HISTORY_DAYS_ENV = "HISTORY_WINDOW_DAYS"
_TODAY_DAYS_ENV = "TODAY_LIST_DAYS"
_SUN_CACHE_ENV = "SUN_CACHE_MAX_ENTRIES"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    api_url: str
    sun_api_url: str
    default_device_id: str
    display_timezone: str
    default_country: str
    http_timeout: float
    history_window_days: int
    today_list_days: int
    sun_cache_max_entries: Optional[int]
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_positive_int(name: str, default: Optional[int]) -> Optional[int]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def read_positive_float(name: str, default: float) -> float:
    value = os.getenv(name)
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
        api_url=_read_str_env(_API_URL_ENV, "https://api.smartcitizen.me/v0").rstrip("/"),
        sun_api_url=_read_str_env(_SUN_API_URL_ENV, "https://api.sunrise-sunset.org").rstrip("/"),
        default_device_id=_read_str_env(_DEFAULT_DEVICE_ENV, "19225"),
        display_timezone=_read_str_env(_TIMEZONE_ENV, "Europe/Athens"),
        default_country=_read_str_env(_COUNTRY_ENV, "Greece"),
        http_timeout=read_positive_float(_TIMEOUT_ENV, 10.0),
        history_window_days=_read_positive_int(_HISTORY_DAYS_ENV, 30) or 30,
        today_list_days=_read_positive_int(_TODAY_DAYS_ENV, 5) or 5,
        sun_cache_max_entries=_read_positive_int(_SUN_CACHE_ENV, None),
        log_level=_read_log_level("INFO"),
    )
