"""
CLI utility helpers -- output formatting and service construction.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from flagwatch.core.settings import get_settings
from flagwatch.flags.descriptions import category_of
from flagwatch.flags.models import FlagRecord
from flagwatch.service import FlagService

console = Console()
err_console = Console(stderr=True)


def make_service() -> FlagService:
    """Build the service from environment settings."""
    return FlagService(get_settings())


# ── Output helpers ───────────────────────────────────────────────────────


def print_json(payload: Any) -> None:
    console.print_json(json.dumps(payload, default=str))


def fail(message: str, code: int = 1) -> None:
    """Print an error and exit."""
    err_console.print(f"[bold red]Error:[/bold red] {message}")
    raise typer.Exit(code=code)


def format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "[green]true[/green]" if value else "[red]false[/red]"
    if isinstance(value, str):
        return f'"{value}"'
    return str(value)


def print_records(records: Sequence[FlagRecord], *, title: str = "", limit: int | None = None) -> None:
    """Render records as a table, truncated to ``limit`` rows."""
    if not records:
        console.print("[dim]No flags.[/dim]")
        return

    shown = records if limit is None else records[:limit]
    table = Table(title=title or None, show_lines=False)
    table.add_column("Name", style="cyan")
    table.add_column("Type")
    table.add_column("Value")
    table.add_column("Platform", style="magenta")
    for record in shown:
        table.add_row(
            record.name,
            record.value_type.value,
            format_value(record.value),
            record.platform or "-",
        )
    console.print(table)
    if len(shown) < len(records):
        console.print(f"[dim]… {len(records) - len(shown)} more (use --limit)[/dim]")


def print_record(record: FlagRecord, *, title: str = "") -> None:
    table = Table(title=title or record.name, show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("name", record.name)
    table.add_row("type", record.value_type.value)
    table.add_row("value", format_value(record.value))
    table.add_row("platform", record.platform or "-")
    table.add_row("category", category_of(record.name))
    for key in ("description", "replacement", "outdated", "type_tag"):
        value = getattr(record, key)
        if value is not None:
            table.add_row(key, str(value))
    table.add_row("observed_at", record.observed_at.isoformat())
    console.print(table)


def split_csv(value: str | None) -> list[str] | None:
    if not value:
        return None
    return [part.strip() for part in value.split(",") if part.strip()]
