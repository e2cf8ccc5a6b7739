from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_dashboard
from services.aggregator import Aggregator
from services.dashboard import DashboardService
from services.errors import DashboardError
from services.source import SourceLoader
from settings import get_settings


@dataclass
class CLIState:
    config: CLIConfig
    client: Optional[ApiClient] = None


app = typer.Typer(
    help="Utilities for summarizing PM2.5 readings and querying the dashboard service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        typer.secho("CLI state is uninitialized.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return state


def _get_client(ctx: typer.Context) -> ApiClient:
    state = _get_state(ctx)
    if state.client is None:
        state.client = ApiClient(state.config)
        ctx.call_on_close(state.client.close)
    return state.client


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Dashboard API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for HTTP responses.",
    ),
) -> None:
    """Entry point for the CLI."""
    ctx.obj = CLIState(config=load_config(base_url=base_url, timeout=timeout))


@app.command("summarize")
def summarize_command(
    source: Optional[str] = typer.Argument(
        None,
        help="CSV path or http(s) URL (defaults to PM25_SOURCE).",
    ),
    date_column: Optional[str] = typer.Option(
        None,
        "--date-column",
        help="Header of the detection date column.",
    ),
    value_column: Optional[str] = typer.Option(
        None,
        "--value-column",
        help="Header of the PM2.5 value column.",
    ),
) -> None:
    """Aggregate a CSV locally and print the dashboard."""
    settings = get_settings()
    service = DashboardService(
        loader=SourceLoader(timeout=settings.fetch_timeout),
        aggregator=Aggregator(),
        source=source or settings.source,
        date_column=date_column or settings.date_column,
        value_column=value_column or settings.value_column,
    )
    try:
        result = asyncio.run(service.load())
    except DashboardError as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc
    render_dashboard(result.model_dump(mode="json"))


@app.command("dashboard")
def dashboard_command(ctx: typer.Context) -> None:
    """Fetch the published dashboard from the API."""
    render_dashboard(_get_client(ctx).get_dashboard())


@app.command("reload")
def reload_command(ctx: typer.Context) -> None:
    """Ask the API to re-fetch its source, then print the new dashboard."""
    state = _get_state(ctx)
    typer.echo(f"Reloading dashboard at {state.config.base_url} ...")
    payload = _get_client(ctx).reload_dashboard()
    typer.secho("Reload complete.", fg=typer.colors.GREEN)
    typer.echo()
    render_dashboard(payload)
