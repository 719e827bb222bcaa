from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import pytest

from models.records import Metric, Rollup
from services.aggregator import DayAggregator
from services.dashboard import DashboardService
from services.fetcher import SmartCitizenClient
from storage.sun_cache import SunTimesCache

API_URL = "https://api.test/v0"
SUN_URL = "https://sun.test"
NOW = datetime(2025, 6, 1, 15, 30, tzinfo=timezone.utc)


def device_payload(
    temperature: Optional[float] = 24.3,
    humidity: Optional[float] = 55.0,
    pm25: Optional[float] = 8.0,
    noise: Optional[float] = 48.0,
    last_reading_at: str = "2025-06-01T15:00:00Z",
) -> Dict[str, Any]:
    return {
        "id": 19225,
        "name": "Web2Learn-gym-Moudros",
        "location": {
            "city": "Moudros",
            "country": "Greece",
            "latitude": 39.87703,
            "longitude": 25.27187,
        },
        "data": {
            "sensors": [
                {"id": 55, "name": "Temperature", "value": temperature, "unit": "ºC", "last_reading_at": last_reading_at},
                {"id": 56, "name": "Humidity", "value": humidity, "unit": "%", "last_reading_at": last_reading_at},
                {"id": 194, "name": "PM 2.5", "value": pm25, "unit": "ug/m3", "last_reading_at": last_reading_at},
                {"id": 53, "name": "Noise Level", "value": noise, "unit": "dBA", "last_reading_at": last_reading_at},
                {"id": 14, "name": "Light", "value": 512, "unit": "lux", "last_reading_at": last_reading_at},
            ]
        },
    }


class FakeSmartCitizen:
    """In-process stand-in for the SmartCitizen and sunrise-sunset APIs.

    Readings are returned when their date falls within ``from``..``to``
    inclusive, which is wider than one UTC day for the 4h lookups.
    """

    def __init__(self) -> None:
        self.device: Any = device_payload()
        self.device_status = 200
        self.readings_status = 200
        self.series: Dict[Tuple[Metric, Rollup], List[List[Any]]] = {}
        self.sun: Dict[str, Dict[str, str]] = {}
        self.sun_status = 200
        self.requests: List[httpx.Request] = []

    def set_series(self, metric: Metric, rollup: Rollup, points: List[List[Any]]) -> None:
        self.series[(metric, rollup)] = points

    def requests_to(self, suffix: str) -> List[httpx.Request]:
        return [request for request in self.requests if request.url.path.endswith(suffix)]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == "sun.test":
            return self._sun(request)
        if request.url.path.endswith("/readings"):
            return self._readings(request)
        if self.device_status != 200:
            return httpx.Response(self.device_status, json={"error": "boom"})
        return httpx.Response(200, json=self.device)

    def _readings(self, request: httpx.Request) -> httpx.Response:
        if self.readings_status != 200:
            return httpx.Response(self.readings_status, json={"error": "boom"})
        params = request.url.params
        metric = Metric.from_sensor_id(int(params["sensor_id"]))
        rollup = Rollup(params["rollup"])
        start, end = params["from"], params["to"]
        points = [
            point
            for point in self.series.get((metric, rollup), [])
            if start <= str(point[0])[:10] <= end
        ]
        # The real API answers newest first.
        points = sorted(points, key=lambda point: str(point[0]), reverse=True)
        return httpx.Response(200, json={"readings": points})

    def _sun(self, request: httpx.Request) -> httpx.Response:
        if self.sun_status != 200:
            return httpx.Response(self.sun_status)
        results = self.sun.get(request.url.params["date"])
        if results is None:
            return httpx.Response(200, json={"results": {}, "status": "INVALID_REQUEST"})
        return httpx.Response(200, json={"results": results, "status": "OK"})


@pytest.fixture()
def fake_api() -> FakeSmartCitizen:
    return FakeSmartCitizen()


@pytest.fixture()
def make_client(fake_api: FakeSmartCitizen) -> Callable[..., SmartCitizenClient]:
    def factory(cache: Optional[SunTimesCache] = None) -> SmartCitizenClient:
        return SmartCitizenClient(
            api_url=API_URL,
            sun_api_url=SUN_URL,
            cache=cache if cache is not None else SunTimesCache(),
            client=httpx.AsyncClient(transport=httpx.MockTransport(fake_api.handler)),
        )

    return factory


@pytest.fixture()
def make_service(make_client) -> Callable[..., DashboardService]:
    def factory(now: datetime = NOW, cache: Optional[SunTimesCache] = None) -> DashboardService:
        return DashboardService(
            client=make_client(cache),
            aggregator=DayAggregator(),
            clock=lambda: now,
        )

    return factory
