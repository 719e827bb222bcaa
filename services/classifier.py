"""Threshold tables that turn metric values into display tags."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Dict, Optional, Sequence, Tuple

from models.records import Classification, Metric


@dataclass(frozen=True)
class Band:
    """One row of a threshold table.

    A value matches when it lies within ``[lower, upper]``; ``None`` leaves
    that side open and ``upper_inclusive=False`` makes the upper edge strict.
    """

    tag: str
    text: str
    upper: Optional[float] = None
    lower: Optional[float] = None
    upper_inclusive: bool = True

    def matches(self, value: float) -> bool:
        if self.lower is not None and value < self.lower:
            return False
        if self.upper is None:
            return True
        return value <= self.upper if self.upper_inclusive else value < self.upper


@dataclass(frozen=True)
class ThresholdTable:
    """Ordered bands evaluated first match; the last band is the fallback."""

    bands: Tuple[Band, ...]

    def classify(self, value: float) -> Classification:
        for band in self.bands:
            if band.matches(value):
                return Classification(tag=band.tag, text=band.text)
        fallback = self.bands[-1]
        return Classification(tag=fallback.tag, text=fallback.text)


def _scale(
    bounds: Sequence[float], labels: Sequence[Tuple[str, str]], strict_first: bool = False
) -> ThresholdTable:
    bands = [
        Band(tag=tag, text=text, upper=upper, upper_inclusive=not (strict_first and index == 0))
        for index, (upper, (tag, text)) in enumerate(zip(bounds, labels))
    ]
    tag, text = labels[len(bounds)]
    bands.append(Band(tag=tag, text=text))
    return ThresholdTable(bands=tuple(bands))


_AIR_LABELS = (
    ("green", "Good"),
    ("light-green", "Fair"),
    ("yellow", "Moderate"),
    ("orange", "Poor"),
    ("red", "Very poor"),
)

# Highlight cards
CARD_TABLES: Dict[Metric, ThresholdTable] = {
    Metric.temperature: _scale(
        (10, 18, 26, 32),
        (
            ("cold", "Cold"),
            ("cool", "Cool"),
            ("comfortable", "Comfortable"),
            ("warm", "Warm"),
            ("hot", "Hot"),
        ),
    ),
    # Nested ranges around the 40-60 % comfort zone, widest last.
    Metric.humidity: ThresholdTable(
        bands=(
            Band(tag="green", text="Good", lower=40, upper=60),
            Band(tag="light-green", text="Fair", lower=30, upper=70),
            Band(tag="yellow", text="Moderate", lower=20, upper=80),
            Band(tag="orange", text="Poor", lower=10, upper=90),
            Band(tag="red", text="Very poor"),
        )
    ),
    Metric.pm25: _scale((5, 15, 25, 50), _AIR_LABELS),
    Metric.noise: _scale((40, 55, 65, 75), _AIR_LABELS, strict_first=True),
}

# Today panel
QUALITY_TABLES: Dict[Metric, ThresholdTable] = {
    Metric.temperature: ThresholdTable(
        bands=(
            Band(tag="blue", text="Cold", upper=10),
            Band(tag="good", text="Normal", upper=25, upper_inclusive=False),
            Band(tag="bad", text="Hot"),
        )
    ),
    Metric.humidity: ThresholdTable(
        bands=(
            Band(tag="moderate", text="Dry", upper=30, upper_inclusive=False),
            Band(tag="good", text="Ideal", upper=60),
            Band(tag="bad", text="Humid"),
        )
    ),
    Metric.pm25: ThresholdTable(
        bands=(
            Band(tag="good", text="Good", upper=12),
            Band(tag="moderate", text="Moderate", upper=35.4),
            Band(tag="bad", text="Unhealthy"),
        )
    ),
    Metric.noise: ThresholdTable(
        bands=(
            Band(tag="good", text="Quiet", upper=40, upper_inclusive=False),
            Band(tag="moderate", text="Normal", upper=70),
            Band(tag="bad", text="Loud"),
        )
    ),
}

QUALITY_UNKNOWN = Classification(tag="moderate", text="N/A")


@dataclass(frozen=True)
class SeasonBand:
    season: str
    low: float
    high: float


# Seasonal temperature norms for Lemnos, by calendar month.
SEASON_BANDS: Dict[int, SeasonBand] = {}
for _season, _months, _low, _high in (
    ("winter", (12, 1, 2), 6, 14),
    ("spring", (3, 4, 5), 11, 22),
    ("summer", (6, 7, 8), 22, 31),
    ("autumn", (9, 10, 11), 13, 24),
):
    for _month in _months:
        SEASON_BANDS[_month] = SeasonBand(season=_season, low=_low, high=_high)

SEASON_BELOW = Classification(tag="tag-blue", text="LOW TEMPERATURES FOR THE SEASON")
SEASON_WITHIN = Classification(tag="tag-green", text="NORMAL TEMPERATURES FOR THE SEASON")
SEASON_ABOVE = Classification(tag="tag-orange", text="HIGH TEMPERATURES FOR THE SEASON")


def _finite(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value)


def classify_card(metric: Metric, value: float) -> Classification:
    return CARD_TABLES[metric].classify(value)


def classify_quality(metric: Metric, value: Optional[float]) -> Classification:
    if not _finite(value):
        return QUALITY_UNKNOWN
    return QUALITY_TABLES[metric].classify(value)


def season_for(day: date) -> SeasonBand:
    return SEASON_BANDS[day.month]


def classify_season(high: Optional[float], low: Optional[float], day: date) -> Classification:
    """Compare the day's midpoint temperature with the seasonal norm."""
    if not _finite(high) or not _finite(low):
        return SEASON_WITHIN
    band = season_for(day)
    midpoint = (high + low) / 2
    if midpoint < band.low:
        return SEASON_BELOW
    if midpoint > band.high:
        return SEASON_ABOVE
    return SEASON_WITHIN


def live_condition(humidity: Optional[float]) -> Optional[str]:
    """Icon for the current-conditions widget, from live humidity."""
    if not _finite(humidity):
        return None
    if humidity >= 75:
        return "rain"
    if humidity >= 50:
        return "mist"
    return "clear"


def history_icon(humidity: Optional[float]) -> str:
    """Icon for a history card, from the day's humidity."""
    if _finite(humidity) and humidity > 75:
        return "rain_cloud"
    if _finite(humidity) and humidity > 50:
        return "cloud"
    return "sunny"
