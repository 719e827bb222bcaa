"""HTTP route definitions for the service."""

from __future__ import annotations

from datetime import date, timedelta
from typing import List, Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.schemas import (
    DashboardView,
    DeviceInfoView,
    HistoryResponse,
    ReadingPoint,
    SensorLocationView,
    SensorReadingView,
    SnapshotResponse,
)
from models.records import SENSOR_LOCATIONS, Metric, Rollup, SensorLocation
from services import presenter
from services.dashboard import DashboardService, build_default_service

router = APIRouter()


def get_service() -> DashboardService:
    return build_default_service()


def dashboard_url(location: SensorLocation) -> str:
    query = urlencode(
        {
            "id": location.device_id,
            "name": location.name,
            "city": location.city,
            "country": location.country,
            "lat": location.lat,
            "lon": location.lon,
        }
    )
    return f"/dashboard?{query}"


@router.get(
    "/api/devices/{device_id}/snapshot",
    response_model=SnapshotResponse,
    summary="Latest values of the tracked sensors for a device.",
)
async def get_snapshot(
    device_id: str,
    service: DashboardService = Depends(get_service),
) -> SnapshotResponse:
    snapshot = await service.snapshot(device_id)
    info = snapshot.info
    return SnapshotResponse(
        device_id=device_id,
        online=not snapshot.is_empty,
        label=presenter.sensor_label(snapshot),
        info=None
        if info is None
        else DeviceInfoView(
            device_id=info.device_id,
            name=info.name,
            city=info.city,
            country=info.country,
            latitude=info.latitude,
            longitude=info.longitude,
        ),
        sensors=[
            SensorReadingView(
                metric=sensor.metric,
                sensor_id=sensor.sensor_id,
                name=sensor.name,
                value=sensor.value,
                unit=sensor.unit,
                timestamp=sensor.timestamp,
            )
            for sensor in snapshot.sensors
        ],
    )


@router.get(
    "/api/devices/{device_id}/history/{metric}",
    response_model=HistoryResponse,
    summary="Historical readings for one metric, oldest first.",
)
async def get_history(
    device_id: str,
    metric: Metric,
    from_date: Optional[date] = Query(None, alias="from"),
    to_date: Optional[date] = Query(None, alias="to"),
    rollup: Rollup = Query(Rollup.one_day),
    service: DashboardService = Depends(get_service),
) -> HistoryResponse:
    end = to_date or service.today()
    start = from_date or end - timedelta(days=service.history_days)
    if start > end:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="'from' must not be after 'to'.",
        )
    readings = await service.readings(device_id, metric, start, end, rollup)
    return HistoryResponse(
        device_id=device_id,
        metric=metric,
        rollup=rollup,
        readings=[ReadingPoint(timestamp=r.timestamp, value=r.value) for r in readings],
    )


@router.get(
    "/api/devices/{device_id}/dashboard",
    response_model=DashboardView,
    summary="Fully computed dashboard for a device.",
)
async def get_dashboard(
    device_id: str,
    service: DashboardService = Depends(get_service),
) -> DashboardView:
    return await service.build_dashboard(device_id)


@router.get(
    "/api/sensors",
    response_model=List[SensorLocationView],
    summary="Known sensor locations shown on the map.",
)
async def list_sensors() -> List[SensorLocationView]:
    return [
        SensorLocationView(
            device_id=location.device_id,
            name=location.name,
            city=location.city,
            country=location.country,
            lat=location.lat,
            lon=location.lon,
            dashboard_url=dashboard_url(location),
        )
        for location in SENSOR_LOCATIONS
    ]


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /map or /dashboard?id=<device> for the pages."}
