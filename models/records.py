"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Optional, Tuple


class Metric(str, Enum):
    """Tracked environmental metrics."""

    temperature = "temperature"
    humidity = "humidity"
    pm25 = "pm25"
    noise = "noise"

    @property
    def sensor_id(self) -> int:
        return SENSOR_IDS[self]

    @classmethod
    def from_sensor_id(cls, sensor_id: int) -> Optional["Metric"]:
        for metric, candidate in SENSOR_IDS.items():
            if candidate == sensor_id:
                return metric
        return None


SENSOR_IDS: Dict[Metric, int] = {
    Metric.temperature: 55,
    Metric.humidity: 56,
    Metric.pm25: 194,
    Metric.noise: 53,
}


class Rollup(str, Enum):
    """Server-side pre-aggregation granularity for historical readings."""

    four_hours = "4h"
    one_day = "1d"


@dataclass(frozen=True, slots=True)
class Reading:
    """A single historical point for one metric."""

    metric: Metric
    timestamp: datetime
    value: Optional[float]


@dataclass(frozen=True, slots=True)
class SensorValue:
    """Latest value reported by one tracked sensor of a device."""

    metric: Metric
    sensor_id: int
    name: str
    value: Optional[float]
    unit: str
    timestamp: Optional[datetime]


@dataclass(frozen=True, slots=True)
class DeviceInfo:
    device_id: str
    name: Optional[str]
    city: str
    country: str
    latitude: Optional[float]
    longitude: Optional[float]


@dataclass(frozen=True, slots=True)
class SensorSnapshot:
    """Live values for the tracked metrics plus device metadata.

    An empty snapshot (no sensors, no info) is how the fetcher reports an
    offline device or a failed request.
    """

    sensors: Tuple[SensorValue, ...] = ()
    info: Optional[DeviceInfo] = None

    @property
    def is_empty(self) -> bool:
        return not self.sensors

    def get(self, metric: Metric) -> Optional[SensorValue]:
        for sensor in self.sensors:
            if sensor.metric is metric:
                return sensor
        return None

    def value_of(self, metric: Metric) -> Optional[float]:
        sensor = self.get(metric)
        return sensor.value if sensor is not None else None


@dataclass(frozen=True, slots=True)
class DayExtrema:
    high: Optional[float] = None
    low: Optional[float] = None
    mean: Optional[float] = None

    @property
    def is_known(self) -> bool:
        return self.high is not None and self.low is not None


@dataclass(frozen=True, slots=True)
class Classification:
    tag: str
    text: str


@dataclass(frozen=True, slots=True)
class SunTimes:
    sunrise: str
    sunset: str


@dataclass(frozen=True, slots=True)
class SensorLocation:
    device_id: int
    name: str
    city: str
    country: str
    lat: float
    lon: float


SENSOR_LOCATIONS: Tuple[SensorLocation, ...] = (
    SensorLocation(
        device_id=19225,
        name="Web2Learn-gym-Moudros",
        city="Moudros",
        country="Greece",
        lat=39.87703,
        lon=25.27187,
    ),
    SensorLocation(
        device_id=19226,
        name="Web2Learn-Lyk-Myrina",
        city="Myrina",
        country="Greece",
        lat=39.874,
        lon=25.062,
    ),
)
