from __future__ import annotations

from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from app.api import dashboard_url
from models.records import SENSOR_LOCATIONS
from services.dashboard import DashboardService, build_default_service
from settings import get_settings


templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


def get_service() -> DashboardService:
    return build_default_service()


router = APIRouter(include_in_schema=False)


@router.get("/dashboard", name="ui_dashboard", response_class=HTMLResponse)
async def ui_dashboard(
    request: Request,
    device_id: Optional[str] = Query(None, alias="id"),
    name: Optional[str] = Query(None),
    city: Optional[str] = Query(None),
    country: Optional[str] = Query(None),
    service: DashboardService = Depends(get_service),
) -> HTMLResponse:
    resolved_id = (device_id or "").strip() or get_settings().default_device_id
    view = await service.build_dashboard(resolved_id)
    place = ", ".join(part for part in (city, country) if part)
    return templates.TemplateResponse(
        request,
        "ui/dashboard.html",
        {
            "view": view,
            "title": name or f"Device {resolved_id}",
            "place": place,
        },
    )


@router.get("/map", name="ui_map", response_class=HTMLResponse)
async def ui_map(request: Request) -> HTMLResponse:
    sensors = [
        {
            "id": location.device_id,
            "name": location.name,
            "city": location.city,
            "lat": location.lat,
            "lon": location.lon,
            "url": dashboard_url(location),
        }
        for location in SENSOR_LOCATIONS
    ]
    return templates.TemplateResponse(request, "ui/map.html", {"sensors": sensors})
