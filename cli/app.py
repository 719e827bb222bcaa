from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

import typer

from cli.client import build_cli_service
from cli.config import CLIConfig, load_config
from cli.render import (
    render_day_lists,
    render_high_low,
    render_history,
    render_sensors,
    render_snapshot,
)
from logging_config import configure_logging
from models.records import SENSOR_LOCATIONS, Metric
from services import presenter
from services.dashboard import DashboardService

T = TypeVar("T")


@dataclass
class CLIState:
    config: CLIConfig


app = typer.Typer(
    help="Weather and air-quality readings from SmartCitizen devices.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1, message="CLI state is uninitialized.")
    return state


def _run(state: CLIState, work: Callable[[DashboardService], Awaitable[T]]) -> T:
    async def runner() -> T:
        service = build_cli_service(state.config)
        try:
            return await work(service)
        finally:
            await service.aclose()

    return asyncio.run(runner())


@app.callback()
def main(
    ctx: typer.Context,
    api_url: Optional[str] = typer.Option(
        None,
        "--api-url",
        "-a",
        help="SmartCitizen API base URL (defaults to SMARTCITIZEN_API_URL env).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each HTTP request.",
    ),
) -> None:
    """Entry point for the CLI."""
    configure_logging()
    ctx.obj = CLIState(config=load_config(api_url=api_url, timeout=timeout))


@app.command("snapshot")
def snapshot_command(
    ctx: typer.Context,
    device_id: Optional[str] = typer.Argument(None, help="SmartCitizen device id."),
) -> None:
    """Show the live values and their classification."""
    state = _get_state(ctx)
    device = device_id or state.config.device_id

    async def work(service: DashboardService):
        snapshot = await service.snapshot(device)
        return service.live_view(device, snapshot)

    render_snapshot(_run(state, work))


@app.command("today")
def today_command(
    ctx: typer.Context,
    device_id: Optional[str] = typer.Argument(None, help="SmartCitizen device id."),
    metric: Optional[Metric] = typer.Option(
        None, "--metric", "-m", help="Limit the day list to one metric."
    ),
) -> None:
    """Show today's high/low and the most recent days per metric."""
    state = _get_state(ctx)
    device = device_id or state.config.device_id
    metrics = [metric] if metric is not None else list(Metric)

    async def work(service: DashboardService):
        snapshot = await service.snapshot(device)
        if snapshot.is_empty:
            return None
        high_low, *day_lists = await asyncio.gather(
            service.high_low(device, snapshot),
            *(service.recent_days(device, m, service.live_value(snapshot, m)) for m in metrics),
        )
        return presenter.high_low_view(high_low), day_lists

    result = _run(state, work)
    if result is None:
        typer.secho(presenter.OFFLINE_LABEL, fg=typer.colors.RED, err=True)
        return
    high_low, day_lists = result
    render_high_low(high_low)
    typer.echo()
    render_day_lists(day_lists)


@app.command("history")
def history_command(
    ctx: typer.Context,
    device_id: Optional[str] = typer.Argument(None, help="SmartCitizen device id."),
) -> None:
    """Show the daily history cards for the last month."""
    state = _get_state(ctx)
    device = device_id or state.config.device_id

    async def work(service: DashboardService):
        snapshot = await service.snapshot(device)
        if snapshot.is_empty:
            return None
        return await service.history(device, snapshot)

    history = _run(state, work)
    if history is None:
        typer.secho(presenter.OFFLINE_LABEL, fg=typer.colors.RED, err=True)
        return
    render_history(history)


@app.command("sensors")
def sensors_command() -> None:
    """List the sensor locations shown on the map page."""
    render_sensors(SENSOR_LOCATIONS)
