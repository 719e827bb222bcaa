"""Dashboard pipeline: fetch, bucket by day, classify and format."""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, timedelta, timezone
from functools import lru_cache
from typing import Callable, List, Optional
from zoneinfo import ZoneInfo

import httpx

from app.schemas import (
    DashboardView,
    DayList,
    HistoryCard,
    HistorySection,
    TodayPanel,
)
from models.records import DayExtrema, Metric, Reading, Rollup, SensorSnapshot
from services import presenter
from services.aggregator import DayAggregator
from services.classifier import classify_season, history_icon, live_condition
from services.fetcher import SmartCitizenClient, build_default_client
from settings import get_settings

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DashboardService:
    """Coordinates the fetcher, aggregator, classifier and presenter.

    Independent fetches are issued concurrently; the only ordering kept is
    snapshot first, since history cards need its coordinates for sun times.
    """

    def __init__(
        self,
        client: SmartCitizenClient,
        aggregator: DayAggregator,
        history_days: int = 30,
        today_list_days: int = 5,
        display_timezone: str = "Europe/Athens",
        clock: Optional[Clock] = None,
    ) -> None:
        self.client = client
        self.aggregator = aggregator
        self.history_days = history_days
        self.today_list_days = today_list_days
        self.display_timezone = ZoneInfo(display_timezone)
        self._clock = clock or _utc_now

    async def aclose(self) -> None:
        await self.client.aclose()

    def today(self) -> date:
        return self._clock().astimezone(timezone.utc).date()

    async def snapshot(self, device_id: str) -> SensorSnapshot:
        return await self.client.fetch_snapshot(device_id)

    async def readings(
        self, device_id: str, metric: Metric, from_date: date, to_date: date, rollup: Rollup
    ) -> List[Reading]:
        return await self.client.fetch_history(device_id, metric, from_date, to_date, rollup)

    async def day_high_low(
        self,
        device_id: str,
        metric: Metric,
        date_key: str,
        live_value: Optional[float] = None,
    ) -> DayExtrema:
        """Extrema for one UTC day from 4-hour rollups, optionally with a live value."""
        day = date.fromisoformat(date_key)
        readings = await self.client.fetch_history(
            device_id, metric, day, day + timedelta(days=1), Rollup.four_hours
        )
        bucket = self.aggregator.group_by_day(readings).get(date_key, [])
        return self.aggregator.day_extrema(bucket, live_value)

    def live_value(self, snapshot: SensorSnapshot, metric: Metric) -> Optional[float]:
        """The live reading of a metric, or None unless it was taken today (UTC)."""
        sensor = snapshot.get(metric)
        if sensor is None or sensor.timestamp is None:
            return None
        if sensor.timestamp.astimezone(timezone.utc).date() != self.today():
            return None
        return sensor.value

    async def high_low(self, device_id: str, snapshot: SensorSnapshot) -> DayExtrema:
        """Hero high/low for the day of the last live temperature reading."""
        sensor = snapshot.get(Metric.temperature)
        today = self.today()
        reference = today
        if sensor is not None and sensor.timestamp is not None:
            reference = sensor.timestamp.astimezone(timezone.utc).date()
        live_value = sensor.value if sensor is not None and reference == today else None
        return await self.day_high_low(
            device_id, Metric.temperature, reference.isoformat(), live_value
        )

    async def recent_days(
        self, device_id: str, metric: Metric, live_value: Optional[float] = None
    ) -> DayList:
        """Today (blended with the live value) followed by the latest prior days."""
        today = self.today()
        today_key = today.isoformat()
        today_extrema, daily = await asyncio.gather(
            self.day_high_low(device_id, metric, today_key, live_value),
            self.client.fetch_history(
                device_id,
                metric,
                today - timedelta(days=self.today_list_days),
                today,
                Rollup.one_day,
            ),
        )

        # Today takes one slot only when it has data of its own.
        prior_limit = self.today_list_days - 1 if today_extrema.is_known else self.today_list_days
        prior_keys = self.aggregator.recent_day_keys(
            self.aggregator.group_by_day(daily).keys(),
            exclude=today_key,
            limit=prior_limit,
        )
        prior_extrema = await asyncio.gather(
            *(self.day_high_low(device_id, metric, key) for key in prior_keys)
        )
        items = [
            presenter.day_list_item(key, extrema, metric)
            for key, extrema in zip(prior_keys, prior_extrema)
        ]

        if today_extrema.is_known:
            items.insert(0, presenter.day_list_item(today_key, today_extrema, metric, is_today=True))

        return DayList(
            metric=metric,
            items=items,
            empty_message=None if items else presenter.NO_DAY_LIST,
        )

    async def history(self, device_id: str, snapshot: SensorSnapshot) -> HistorySection:
        """Daily cards for the history window, newest first."""
        today = self.today()
        start = today - timedelta(days=self.history_days)
        metrics = list(Metric)
        series = await asyncio.gather(
            *(
                self.client.fetch_history(device_id, metric, start, today, Rollup.one_day)
                for metric in metrics
            )
        )
        days = self.aggregator.merge_daily(dict(zip(metrics, series)))
        keys = self.aggregator.days_with(Metric.temperature, days)
        if not keys:
            return HistorySection(empty_message=presenter.NO_HISTORY)

        info = snapshot.info
        lat = info.latitude if info is not None else None
        lon = info.longitude if info is not None else None

        extrema_per_day = await asyncio.gather(
            *(self.day_high_low(device_id, Metric.temperature, key) for key in keys)
        )
        sun_per_day = await asyncio.gather(
            *(self.client.fetch_sun_times(lat, lon, key) for key in keys)
        )

        cards: List[HistoryCard] = []
        for key, extrema, sun in zip(keys, extrema_per_day, sun_per_day):
            row = days[key]
            high = None if extrema.high is None else presenter.round_half_up(extrema.high)
            low = None if extrema.low is None else presenter.round_half_up(extrema.low)
            cards.append(
                presenter.history_card(
                    date_key=key,
                    high=high,
                    low=low,
                    row=row,
                    season=classify_season(high, low, date.fromisoformat(key)),
                    sun=sun,
                    icon=history_icon(row.get(Metric.humidity)),
                )
            )
        return HistorySection(cards=cards)

    def live_view(self, device_id: str, snapshot: SensorSnapshot) -> DashboardView:
        """The parts of the dashboard computed from the snapshot alone."""
        label = presenter.sensor_label(snapshot)
        if snapshot.is_empty:
            return DashboardView(device_id=device_id, online=False, label=label)

        highlights = [presenter.highlight_card(metric, snapshot.get(metric)) for metric in Metric]
        today: List[TodayPanel] = []
        for metric in Metric:
            sensor = snapshot.get(metric)
            if sensor is not None:
                today.append(presenter.today_panel(metric, sensor))

        temperature_bar = None
        temperature = snapshot.value_of(Metric.temperature)
        if temperature is not None:
            temperature_bar = presenter.temperature_bar(temperature, highlights[0].display)

        now = self._clock().astimezone(self.display_timezone)
        return DashboardView(
            device_id=device_id,
            online=True,
            label=label,
            highlights=highlights,
            today=today,
            realtime=presenter.realtime_values(snapshot),
            condition=presenter.condition_view(
                now, live_condition(snapshot.value_of(Metric.humidity))
            ),
            temperature_bar=temperature_bar,
        )

    async def build_dashboard(self, device_id: str) -> DashboardView:
        snapshot = await self.snapshot(device_id)
        view = self.live_view(device_id, snapshot)
        if not view.online:
            logger.warning("No live sensor data found", extra={"device_id": device_id})
            return view

        high_low, history, *day_lists = await asyncio.gather(
            self.high_low(device_id, snapshot),
            self.history(device_id, snapshot),
            *(
                self.recent_days(device_id, metric, self.live_value(snapshot, metric))
                for metric in Metric
            ),
        )
        return view.model_copy(
            update={
                "high_low": presenter.high_low_view(high_low),
                "history": history,
                "day_lists": list(day_lists),
            }
        )


def build_service(
    http_client: Optional[httpx.AsyncClient] = None, clock: Optional[Clock] = None
) -> DashboardService:
    """Wire a service from environment settings."""
    settings = get_settings()
    return DashboardService(
        client=build_default_client(http_client),
        aggregator=DayAggregator(),
        history_days=settings.history_window_days,
        today_list_days=settings.today_list_days,
        display_timezone=settings.display_timezone,
        clock=clock,
    )


@lru_cache
def build_default_service() -> DashboardService:
    """Process-wide service used by the HTTP layer."""
    return build_service()
