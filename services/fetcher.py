"""Read-only access to the SmartCitizen and sunrise-sunset APIs."""

from __future__ import annotations

import logging
import math
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

import httpx

from models.records import (
    DeviceInfo,
    Metric,
    Reading,
    Rollup,
    SensorSnapshot,
    SensorValue,
    SunTimes,
)
from settings import get_settings
from storage.sun_cache import SunTimesCache, build_default_cache

logger = logging.getLogger(__name__)

UNKNOWN_CITY = "Unknown City"


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into an aware UTC datetime."""
    candidate = value.strip()
    if not candidate:
        raise ValueError("Timestamp is empty.")

    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError as exc:
        raise ValueError("Invalid timestamp format") from exc

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)

    return parsed.astimezone(timezone.utc)


def to_float(value: Any) -> Optional[float]:
    """Coerce an API value to a finite float; anything else is absent."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _optional_timestamp(value: Any) -> Optional[datetime]:
    if not isinstance(value, str):
        return None
    try:
        return parse_timestamp(value)
    except ValueError:
        return None


class SmartCitizenClient:
    """Fetches device snapshots, reading histories and sun times.

    Every public coroutine fails softly: transport errors, non-success
    statuses and malformed bodies are logged and turned into an empty
    result, never raised to the caller.
    """

    def __init__(
        self,
        api_url: str,
        sun_api_url: str,
        cache: SunTimesCache,
        display_timezone: str = "Europe/Athens",
        default_country: str = "Greece",
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.sun_api_url = sun_api_url.rstrip("/")
        self.cache = cache
        self.display_timezone = ZoneInfo(display_timezone)
        self.default_country = default_country
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_snapshot(self, device_id: str) -> SensorSnapshot:
        url = f"{self.api_url}/devices/{device_id}"
        try:
            response = await self._client.get(url)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "Live data request failed",
                extra={"device_id": device_id, "status_code": exc.response.status_code},
            )
            return SensorSnapshot()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(
                "Live data request failed",
                extra={"device_id": device_id, "reason": str(exc) or type(exc).__name__},
            )
            return SensorSnapshot()

        if not isinstance(payload, dict):
            logger.warning(
                "Unexpected device payload", extra={"device_id": device_id, "reason": "not an object"}
            )
            return SensorSnapshot()

        data = payload.get("data")
        raw_sensors = data.get("sensors") if isinstance(data, dict) else None
        if not isinstance(raw_sensors, list):
            logger.warning(
                "Unexpected device payload", extra={"device_id": device_id, "reason": "missing sensors"}
            )
            return SensorSnapshot()

        sensors: List[SensorValue] = []
        for raw in raw_sensors:
            if not isinstance(raw, dict):
                continue
            metric = Metric.from_sensor_id(raw.get("id"))
            if metric is None:
                continue
            sensors.append(
                SensorValue(
                    metric=metric,
                    sensor_id=metric.sensor_id,
                    name=str(raw.get("name") or metric.value),
                    value=to_float(raw.get("value")),
                    unit=str(raw.get("unit") or ""),
                    timestamp=_optional_timestamp(raw.get("last_reading_at")),
                )
            )

        return SensorSnapshot(sensors=tuple(sensors), info=self._device_info(device_id, payload))

    async def fetch_history(
        self,
        device_id: str,
        metric: Metric,
        from_date: date,
        to_date: date,
        rollup: Rollup = Rollup.four_hours,
    ) -> List[Reading]:
        """Return the readings for one sensor in chronological order."""
        url = f"{self.api_url}/devices/{device_id}/readings"
        params = {
            "sensor_id": metric.sensor_id,
            "rollup": rollup.value,
            "from": from_date.isoformat(),
            "to": to_date.isoformat(),
        }
        context = {"device_id": device_id, "metric": metric.value, "rollup": rollup.value}
        try:
            response = await self._client.get(url, params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "History request failed",
                extra={**context, "status_code": exc.response.status_code},
            )
            return []
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(
                "History request failed",
                extra={**context, "reason": str(exc) or type(exc).__name__},
            )
            return []

        raw_readings = payload.get("readings") if isinstance(payload, dict) else None
        if not isinstance(raw_readings, list):
            logger.warning("History response has no readings", extra=context)
            return []

        readings: List[Reading] = []
        for point in raw_readings:
            if not isinstance(point, (list, tuple)) or not point:
                continue
            timestamp = _optional_timestamp(point[0])
            if timestamp is None:
                continue
            value = to_float(point[1]) if len(point) > 1 else None
            readings.append(Reading(metric=metric, timestamp=timestamp, value=value))

        readings.sort(key=lambda reading: reading.timestamp)
        return readings

    async def fetch_sun_times(
        self, lat: Optional[float], lon: Optional[float], date_key: str
    ) -> Optional[SunTimes]:
        lat_value = to_float(lat)
        lon_value = to_float(lon)
        if lat_value is None or lon_value is None:
            return None

        cached = self.cache.get(lat_value, lon_value, date_key)
        if cached is not None:
            return cached

        url = f"{self.sun_api_url}/json"
        params = {"lat": lat_value, "lng": lon_value, "date": date_key, "formatted": 0}
        try:
            response = await self._client.get(url, params=params)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(
                "Sun times request failed",
                extra={"date_key": date_key, "reason": str(exc) or type(exc).__name__},
            )
            return None

        results = payload.get("results") if isinstance(payload, dict) else None
        if not isinstance(results, dict):
            return None
        sunrise = _optional_timestamp(results.get("sunrise"))
        sunset = _optional_timestamp(results.get("sunset"))
        if sunrise is None or sunset is None:
            return None

        times = SunTimes(sunrise=self._local_clock(sunrise), sunset=self._local_clock(sunset))
        self.cache.put(lat_value, lon_value, date_key, times)
        return times

    def _local_clock(self, instant: datetime) -> str:
        return instant.astimezone(self.display_timezone).strftime("%H:%M")

    def _device_info(self, device_id: str, payload: Dict[str, Any]) -> DeviceInfo:
        location = payload.get("location")
        if not isinstance(location, dict):
            location = {}
        name = payload.get("name")
        return DeviceInfo(
            device_id=str(payload.get("id") or device_id),
            name=str(name) if name else None,
            city=location.get("city") or UNKNOWN_CITY,
            country=location.get("country") or self.default_country,
            latitude=to_float(location.get("latitude")),
            longitude=to_float(location.get("longitude")),
        )


def build_default_client(client: Optional[httpx.AsyncClient] = None) -> SmartCitizenClient:
    """Factory that wires the fetcher from environment settings."""
    settings = get_settings()
    return SmartCitizenClient(
        api_url=settings.api_url,
        sun_api_url=settings.sun_api_url,
        cache=build_default_cache(),
        display_timezone=settings.display_timezone,
        default_country=settings.default_country,
        timeout=settings.http_timeout,
        client=client,
    )
