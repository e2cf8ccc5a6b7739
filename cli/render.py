from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

import typer

MONTH_NAMES = (
    "Gennaio",
    "Febbraio",
    "Marzo",
    "Aprile",
    "Maggio",
    "Giugno",
    "Luglio",
    "Agosto",
    "Settembre",
    "Ottobre",
    "Novembre",
    "Dicembre",
)

UNIT = "µg/m³"


def month_name(month: int) -> str:
    return MONTH_NAMES[month - 1]


def format_value(value: Optional[float]) -> str:
    if value is None:
        return "n/d"
    return f"{value:.1f}"


def format_raw(value: Optional[float]) -> str:
    """Show a measurement as recorded: ``87.0`` prints as ``87``."""
    if value is None:
        return "n/d"
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_dashboard(payload: Dict[str, Any]) -> None:
    threshold = payload.get("threshold")
    echo_heading("Monitoraggio PM2.5")
    echo_key_values(
        [
            ("source", payload.get("source")),
            ("loaded_at", payload.get("loaded_at")),
            ("processing_ms", payload.get("processing_ms")),
        ]
    )

    overall = payload.get("overall") or {}
    typer.echo()
    echo_heading("Statistiche")
    if overall.get("has_data"):
        echo_key_values(
            [
                ("Media Periodo", f"{format_value(overall.get('avg_value'))} {UNIT}"),
                ("Valore Massimo", f"{format_raw(overall.get('max_value'))} {UNIT}"),
                (
                    "Superamenti Totali",
                    f"{overall.get('exceedances')} giorni sopra {format_value(threshold)} {UNIT}",
                ),
            ]
        )
    else:
        typer.echo("Nessun dato disponibile.")

    monthly = payload.get("monthly") or []
    typer.echo()
    echo_heading("Analisi Mensile dei Superamenti")
    if monthly:
        typer.echo(f"{'Mese':<16} {'Media':>8} {'Giorni':>7} {'Sopra':>6} {'%':>6}")
        for row in monthly:
            label = f"{month_name(row['month'])} {row['year']}"
            percentage = format_value(row.get("exceedance_percentage"))
            typer.echo(
                f"{label:<16} {format_value(row.get('avg_value')):>8} "
                f"{row.get('total_days'):>7} {row.get('exceedances'):>6} {percentage:>6}"
            )
    else:
        typer.echo("Nessun mese disponibile.")

    issues = payload.get("issues") or []
    if issues:
        typer.echo()
        echo_heading("Righe scartate")
        for issue in issues:
            typer.echo(f"  - row {issue.get('row_number')}: {issue.get('reason')}")

    typer.echo()
    typer.echo(f"Dati aggiornati al: {payload.get('last_updated') or 'n/d'}")
