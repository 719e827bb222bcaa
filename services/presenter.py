"""Formatting of computed values into the dashboard's view models.

Nothing here fetches or mutates; every function maps already computed
values and classifications to display strings and style tags.
"""

from __future__ import annotations

import math
from datetime import date, datetime
from typing import Dict, Optional

from app.schemas import (
    ConditionView,
    DayListItem,
    HighlightCard,
    HighLowView,
    HistoryCard,
    TemperatureBar,
    TodayPanel,
)
from models.records import (
    Classification,
    DayExtrema,
    DeviceInfo,
    Metric,
    SensorSnapshot,
    SensorValue,
    SunTimes,
)
from services.classifier import classify_card, classify_quality

PLACEHOLDER = "--"
OFFLINE_LABEL = "Sensor Offline or No Data"
LOADING_LABEL = "Loading..."
NO_DAY_LIST = "No history found."
NO_HISTORY = "No history data found."

TEMP_BAR_MIN = -5.0
TEMP_BAR_MAX = 45.0

# Suffixes used by the today card lists and the realtime strip.
UNIT_SUFFIXES: Dict[Metric, str] = {
    Metric.temperature: "°C",
    Metric.humidity: "%",
    Metric.pm25: " µg/m³",
    Metric.noise: " dB",
}

_INTEGER_METRICS = frozenset({Metric.pm25, Metric.noise})

WEEKDAYS = ("MONDAY", "TUESDAY", "WEDNESDAY", "THURSDAY", "FRIDAY", "SATURDAY", "SUNDAY")
MONTHS = (
    "JANUARY",
    "FEBRUARY",
    "MARCH",
    "APRIL",
    "MAY",
    "JUNE",
    "JULY",
    "AUGUST",
    "SEPTEMBER",
    "OCTOBER",
    "NOVEMBER",
    "DECEMBER",
)


def round_half_up(value: float) -> int:
    """Round the way browsers display it: halves go towards +inf."""
    return int(math.floor(value + 0.5))


def pretty_unit(unit: Optional[str]) -> str:
    if not unit:
        return ""
    if unit == "ug/m3":
        return " µg/m³"
    return f" {unit}"


def format_number(metric: Metric, value: float) -> str:
    """Integer for PM2.5 and noise, one decimal otherwise."""
    if metric in _INTEGER_METRICS:
        return str(round_half_up(value))
    return f"{value:.1f}"


def format_rounded(value: Optional[float], suffix: str = "", placeholder: str = PLACEHOLDER) -> str:
    if value is None:
        return placeholder
    return f"{round_half_up(value)}{suffix}"


def sensor_label(snapshot: SensorSnapshot) -> str:
    if snapshot.is_empty:
        return OFFLINE_LABEL
    info: Optional[DeviceInfo] = snapshot.info
    if info is None or not info.name:
        return LOADING_LABEL
    lat = PLACEHOLDER if info.latitude is None else str(info.latitude)
    lon = PLACEHOLDER if info.longitude is None else str(info.longitude)
    return f"{info.city} - {info.name} - {lat} - {lon}"


def highlight_card(metric: Metric, sensor: Optional[SensorValue]) -> HighlightCard:
    if sensor is None or sensor.value is None:
        return HighlightCard(metric=metric)
    classification = classify_card(metric, sensor.value)
    return HighlightCard(
        metric=metric,
        display=format_number(metric, sensor.value) + pretty_unit(sensor.unit),
        tag=classification.tag,
        css_class=f"card-{classification.tag}",
    )


def quality_css_class(classification: Classification) -> str:
    # The cold tier reuses the "good" styling.
    if classification.tag == "blue":
        return "quality-good"
    return f"quality-{classification.tag}"


def today_panel(metric: Metric, sensor: SensorValue) -> TodayPanel:
    classification = classify_quality(metric, sensor.value)
    number = PLACEHOLDER if sensor.value is None else format_number(metric, sensor.value)
    return TodayPanel(
        metric=metric,
        status_label=sensor.name,
        number=number,
        unit=sensor.unit,
        quality_text=classification.text,
        quality_class=quality_css_class(classification),
    )


def realtime_values(snapshot: SensorSnapshot) -> Dict[str, str]:
    values: Dict[str, str] = {}
    for metric in Metric:
        value = snapshot.value_of(metric)
        if value is not None:
            values[metric.value] = format_rounded(value, UNIT_SUFFIXES[metric])
    return values


def temperature_bar(value: float, label: str) -> TemperatureBar:
    percentage = (value - TEMP_BAR_MIN) / (TEMP_BAR_MAX - TEMP_BAR_MIN) * 100
    return TemperatureBar(label=label, percentage=max(0.0, min(100.0, percentage)))


def condition_view(now: datetime, icon: Optional[str]) -> ConditionView:
    return ConditionView(day_time=now.strftime("%A, %H:%M"), icon=icon)


def high_low_view(extrema: DayExtrema) -> HighLowView:
    return HighLowView(
        high=extrema.high,
        low=extrema.low,
        high_display=format_rounded(extrema.high, "°C"),
        low_display=format_rounded(extrema.low, "°C"),
    )


def day_list_item(
    date_key: str, extrema: DayExtrema, metric: Metric, is_today: bool = False
) -> DayListItem:
    day = date.fromisoformat(date_key)
    name = "Today" if is_today else day.strftime("%a")
    suffix = UNIT_SUFFIXES[metric]
    return DayListItem(
        date=date_key,
        label=f"{name} {day.day}",
        is_today=is_today,
        high=extrema.high,
        low=extrema.low,
        high_display=format_rounded(extrema.high, suffix),
        low_display=format_rounded(extrema.low, suffix),
    )


def sun_text(times: Optional[SunTimes]) -> str:
    if times is None:
        return "Sunrise: --:-- / Sunset: --:--"
    return f"Sunrise: {times.sunrise} / Sunset: {times.sunset}"


def history_card(
    date_key: str,
    high: Optional[int],
    low: Optional[int],
    row: Dict[Metric, Optional[float]],
    season: Classification,
    sun: Optional[SunTimes],
    icon: str,
) -> HistoryCard:
    day = date.fromisoformat(date_key)
    return HistoryCard(
        date=date_key,
        day_number=day.day,
        month=MONTHS[day.month - 1],
        weekday=WEEKDAYS[day.weekday()],
        sun_text=sun_text(sun),
        icon=icon,
        high_display=f"{PLACEHOLDER if high is None else high}°C",
        low_display=f"{PLACEHOLDER if low is None else low}°C",
        pm25_display=format_rounded(row.get(Metric.pm25), placeholder="-") + " µg/m³",
        humidity_display=format_rounded(row.get(Metric.humidity), placeholder="-") + "%",
        noise_display=format_rounded(row.get(Metric.noise), placeholder="-") + " dB",
        tag_class=season.tag,
        tag_text=season.text,
    )
