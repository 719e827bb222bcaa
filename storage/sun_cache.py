from __future__ import annotations

from collections import OrderedDict
from functools import lru_cache
from threading import Lock
from typing import Iterable, Optional, Tuple

from models.records import SunTimes
from settings import get_settings

CacheKey = Tuple[float, float, str]


class SunTimesCache:
    """In-memory sunrise/sunset store keyed by (lat, lon, date).

    Unbounded unless ``max_entries`` is given, in which case the oldest
    insertion is evicted first. Writes for the same key are idempotent, so
    concurrent duplicate lookups only cost an extra request.
    """

    def __init__(self, max_entries: Optional[int] = None) -> None:
        self.max_entries = max_entries
        self._entries: "OrderedDict[CacheKey, SunTimes]" = OrderedDict()
        self._lock = Lock()

    @staticmethod
    def make_key(lat: float, lon: float, date_key: str) -> CacheKey:
        return (float(lat), float(lon), date_key)

    def get(self, lat: float, lon: float, date_key: str) -> Optional[SunTimes]:
        with self._lock:
            return self._entries.get(self.make_key(lat, lon, date_key))

    def put(self, lat: float, lon: float, date_key: str, times: SunTimes) -> None:
        key = self.make_key(lat, lon, date_key)
        with self._lock:
            self._entries[key] = times
            if self.max_entries is not None:
                while len(self._entries) > self.max_entries:
                    self._entries.popitem(last=False)

    def keys(self) -> Iterable[CacheKey]:
        with self._lock:
            return list(self._entries.keys())

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


@lru_cache
def build_default_cache(max_entries: Optional[int] = None) -> SunTimesCache:
    settings = get_settings()
    limit = settings.sun_cache_max_entries if max_entries is None else max_entries
    return SunTimesCache(max_entries=limit)
