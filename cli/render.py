from __future__ import annotations

from typing import Any, Iterable, Sequence

import typer

from app.schemas import DashboardView, DayList, HighLowView, HistorySection
from models.records import SensorLocation

_CARD_COLORS = {
    "cold": typer.colors.BLUE,
    "cool": typer.colors.CYAN,
    "comfortable": typer.colors.GREEN,
    "green": typer.colors.GREEN,
    "light-green": typer.colors.BRIGHT_GREEN,
    "warm": typer.colors.YELLOW,
    "yellow": typer.colors.YELLOW,
    "orange": typer.colors.BRIGHT_RED,
    "hot": typer.colors.RED,
    "red": typer.colors.RED,
}


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_snapshot(view: DashboardView) -> None:
    echo_heading("Sensor")
    typer.echo(view.label)
    if not view.online:
        return

    typer.echo()
    echo_heading("Highlights")
    for card in view.highlights:
        color = _CARD_COLORS.get(card.tag or "")
        typer.secho(f"{card.metric.value}: {card.display}", fg=color)

    typer.echo()
    echo_heading("Today")
    echo_key_values(
        (panel.status_label, f"{panel.number} {panel.unit} ({panel.quality_text})")
        for panel in view.today
    )
    if view.condition is not None:
        typer.echo(f"{view.condition.day_time} {view.condition.icon or ''}".rstrip())


def render_high_low(high_low: HighLowView) -> None:
    echo_heading("High / Low")
    echo_key_values([("high", high_low.high_display), ("low", high_low.low_display)])


def render_day_lists(day_lists: Sequence[DayList]) -> None:
    for day_list in day_lists:
        echo_heading(f"Recent days: {day_list.metric.value}")
        if day_list.empty_message:
            typer.echo(day_list.empty_message)
        for item in day_list.items:
            line = f"  {item.label:<8} {item.high_display:>10} {item.low_display:>10}"
            typer.secho(line, bold=item.is_today)
        typer.echo()


def render_history(history: HistorySection) -> None:
    echo_heading("History")
    if history.empty_message:
        typer.echo(history.empty_message)
        return
    for card in history.cards:
        typer.echo(
            f"{card.weekday} {card.day_number} {card.month}: "
            f"{card.high_display} / {card.low_display}  "
            f"PM2.5 {card.pm25_display}  Humidity {card.humidity_display}  "
            f"Noise {card.noise_display}"
        )
        typer.echo(f"  {card.sun_text}  [{card.tag_text}]")


def render_sensors(locations: Iterable[SensorLocation]) -> None:
    echo_heading("Sensors")
    for location in locations:
        typer.echo(
            f"  - {location.device_id}: {location.name} "
            f"({location.city}, {location.country}) {location.lat}, {location.lon}"
        )
