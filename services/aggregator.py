"""Day bucketing and extrema for historical readings."""

from __future__ import annotations

import math
from typing import Dict, Iterable, List, Mapping, Optional

from models.records import DayExtrema, Metric, Reading


def day_key(reading: Reading) -> str:
    """UTC calendar date of a reading as ``YYYY-MM-DD``."""
    return reading.timestamp.date().isoformat()


def _is_number(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value)


class DayAggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def group_by_day(self, readings: Iterable[Reading]) -> Dict[str, List[float]]:
        buckets: Dict[str, List[float]] = {}
        for reading in readings:
            if not _is_number(reading.value):
                continue
            buckets.setdefault(day_key(reading), []).append(float(reading.value))
        return buckets

    def day_extrema(
        self, values: Iterable[float], live_value: Optional[float] = None
    ) -> DayExtrema:
        """High, low and mean of a bucket, optionally blended with a live value."""
        pool = [float(value) for value in values if _is_number(value)]
        if _is_number(live_value):
            pool.append(float(live_value))
        if not pool:
            return DayExtrema()
        return DayExtrema(high=max(pool), low=min(pool), mean=sum(pool) / len(pool))

    def recent_day_keys(
        self, date_keys: Iterable[str], exclude: Optional[str], limit: int
    ) -> List[str]:
        """Distinct date keys other than ``exclude``, newest first, capped at ``limit``."""
        distinct = {key for key in date_keys if key and key != exclude}
        return sorted(distinct, reverse=True)[: max(limit, 0)]

    def merge_daily(
        self, series: Mapping[Metric, Iterable[Reading]]
    ) -> Dict[str, Dict[Metric, Optional[float]]]:
        """Fold daily-rollup series into one row per date.

        A later point for the same date and metric replaces an earlier one.
        Points with an absent value still register the date.
        """
        days: Dict[str, Dict[Metric, Optional[float]]] = {}
        for metric, readings in series.items():
            for reading in readings:
                row = days.setdefault(day_key(reading), {})
                row[metric] = reading.value if _is_number(reading.value) else None
        return days

    def days_with(
        self, metric: Metric, days: Mapping[str, Mapping[Metric, Optional[float]]]
    ) -> List[str]:
        """Date keys that carry a value for ``metric``, newest first."""
        return sorted(
            (key for key, row in days.items() if row.get(metric) is not None),
            reverse=True,
        )
