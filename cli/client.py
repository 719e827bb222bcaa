from __future__ import annotations

from typing import Optional

import httpx

from cli.config import CLIConfig
from services.aggregator import DayAggregator
from services.dashboard import DashboardService
from services.fetcher import SmartCitizenClient
from settings import get_settings
from storage.sun_cache import SunTimesCache


def build_cli_service(
    config: CLIConfig, http_client: Optional[httpx.AsyncClient] = None
) -> DashboardService:
    """Service wired for one CLI invocation; the caller closes it."""
    settings = get_settings()
    client = SmartCitizenClient(
        api_url=config.api_url,
        sun_api_url=settings.sun_api_url,
        cache=SunTimesCache(max_entries=settings.sun_cache_max_entries),
        display_timezone=settings.display_timezone,
        default_country=settings.default_country,
        timeout=config.timeout,
        client=http_client,
    )
    return DashboardService(
        client=client,
        aggregator=DayAggregator(),
        history_days=settings.history_window_days,
        today_list_days=settings.today_list_days,
        display_timezone=settings.display_timezone,
    )
