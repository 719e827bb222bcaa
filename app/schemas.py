"""Pydantic schemas for the HTTP API layer and page templates."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from models.records import Metric, Rollup


class DeviceInfoView(BaseModel):
    device_id: str
    name: Optional[str] = None
    city: str
    country: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class SensorReadingView(BaseModel):
    """Latest value of one tracked sensor."""

    metric: Metric
    sensor_id: int
    name: str
    value: Optional[float] = None
    unit: str = ""
    timestamp: Optional[datetime] = None


class SnapshotResponse(BaseModel):
    device_id: str
    online: bool
    label: str
    info: Optional[DeviceInfoView] = None
    sensors: List[SensorReadingView] = Field(default_factory=list)


class ReadingPoint(BaseModel):
    timestamp: datetime
    value: Optional[float] = None


class HistoryResponse(BaseModel):
    device_id: str
    metric: Metric
    rollup: Rollup
    readings: List[ReadingPoint] = Field(default_factory=list)


class HighlightCard(BaseModel):
    """Highlight card for one metric; ``tag`` selects the card colour."""

    metric: Metric
    display: str = "--"
    tag: Optional[str] = None
    css_class: Optional[str] = None


class TodayPanel(BaseModel):
    metric: Metric
    status_label: str
    number: str
    unit: str
    quality_text: str
    quality_class: str


class HighLowView(BaseModel):
    high: Optional[float] = None
    low: Optional[float] = None
    high_display: str = "--"
    low_display: str = "--"


class TemperatureBar(BaseModel):
    label: str
    percentage: float = Field(..., ge=0, le=100)


class ConditionView(BaseModel):
    day_time: str
    icon: Optional[str] = None


class DayListItem(BaseModel):
    """One row of the today card's trailing-days list."""

    date: str
    label: str
    is_today: bool = False
    high: Optional[float] = None
    low: Optional[float] = None
    high_display: str = "--"
    low_display: str = "--"


class DayList(BaseModel):
    metric: Metric
    items: List[DayListItem] = Field(default_factory=list)
    empty_message: Optional[str] = None


class HistoryCard(BaseModel):
    date: str
    day_number: int
    month: str
    weekday: str
    sun_text: str
    icon: str
    high_display: str
    low_display: str
    pm25_display: str
    humidity_display: str
    noise_display: str
    tag_class: str
    tag_text: str


class HistorySection(BaseModel):
    cards: List[HistoryCard] = Field(default_factory=list)
    empty_message: Optional[str] = None


class DashboardView(BaseModel):
    """Everything the dashboard page renders for one device."""

    device_id: str
    online: bool
    label: str
    highlights: List[HighlightCard] = Field(default_factory=list)
    today: List[TodayPanel] = Field(default_factory=list)
    realtime: Dict[str, str] = Field(default_factory=dict)
    condition: Optional[ConditionView] = None
    temperature_bar: Optional[TemperatureBar] = None
    high_low: Optional[HighLowView] = None
    day_lists: List[DayList] = Field(default_factory=list)
    history: Optional[HistorySection] = None


class SensorLocationView(BaseModel):
    device_id: int
    name: str
    city: str
    country: str
    lat: float
    lon: float
    dashboard_url: str
