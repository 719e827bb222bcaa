from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from settings import get_settings, read_positive_float

_DEVICE_ENV = "CLI_DEVICE_ID"
_TIMEOUT_ENV = "CLI_HTTP_TIMEOUT"


@dataclass(frozen=True)
class CLIConfig:
    """Per-invocation options; anything unset falls back to ``Settings``."""

    api_url: str
    device_id: str
    timeout: float


def load_config(
    api_url: Optional[str] = None,
    device_id: Optional[str] = None,
    timeout: Optional[float] = None,
) -> CLIConfig:
    settings = get_settings()
    url = (api_url or "").strip() or settings.api_url
    device = (device_id or os.getenv(_DEVICE_ENV) or "").strip() or settings.default_device_id
    if timeout is None or timeout <= 0:
        timeout = read_positive_float(_TIMEOUT_ENV, settings.http_timeout)
    return CLIConfig(api_url=url.rstrip("/"), device_id=device, timeout=timeout)
