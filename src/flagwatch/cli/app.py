"""
Root Typer application for the flagwatch CLI.

Every command builds one ``FlagService`` for the duration of the call, so
documents fetched while answering it are shared between its lookups.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TypeVar

import typer
from rich.table import Table

from flagwatch import __version__
from flagwatch.cli.utils import (
    console,
    fail,
    format_value,
    make_service,
    print_json,
    print_record,
    print_records,
    split_csv,
)
from flagwatch.core.errors import FlagwatchError
from flagwatch.core.logging import configure_logging
from flagwatch.core.settings import get_settings
from flagwatch.flags.analysis import compute_stats, format_distribution
from flagwatch.flags.checklist import LIST_FORMATS, export_checks, parse_flag_list, summarize
from flagwatch.flags.convert import convert_flags, parse_flag_input
from flagwatch.flags.export import export_records
from flagwatch.flags.models import ResolutionStatus
from flagwatch.flags.optimize import recommendations_for
from flagwatch.service import FlagService
from flagwatch.sources.catalog import SourceCatalog

T = TypeVar("T")

app = typer.Typer(
    name="flagwatch",
    help="flagwatch — resolve, search and list remotely published feature flags.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"flagwatch {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """flagwatch CLI — cached lookups against the flag tracker."""
    try:
        settings = get_settings()
    except FlagwatchError as e:
        fail(e.message)
    configure_logging(level=settings.log_level, json_format=settings.json_logs)


def _run(work: Callable[[FlagService], Awaitable[T]]) -> T:
    """Run ``work`` against a fresh service; domain errors become exit code 1."""

    async def runner() -> T:
        async with make_service() as service:
            return await work(service)

    try:
        return asyncio.run(runner())
    except FlagwatchError as e:
        fail(e.message)


# ------------------------------------------------------------------ #
# Lookup Commands
# ------------------------------------------------------------------ #


@app.command("resolve")
def resolve(
    name: str = typer.Argument(..., help="Exact flag name"),
    platform: str | None = typer.Option(None, "--platform", "-p", help="Only this platform document"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Resolve a flag by exact name."""
    if platform:
        record = _run(lambda s: s.resolve_for_platform(name, platform))
    else:
        record = _run(lambda s: s.resolve(name))

    if record is None:
        where = f" on {platform}" if platform else ""
        fail(f"flag {name} not found{where}")
    if json_out:
        print_json(record.to_dict())
    else:
        print_record(record)


@app.command("lookup")
def lookup(
    name: str = typer.Argument(..., help="Exact flag name"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Resolve a flag and report whether any source was unreachable."""
    resolution = _run(lambda s: s.lookup(name))

    if json_out:
        print_json(
            {
                "flag": name,
                "status": resolution.status.value,
                "record": resolution.record.to_dict() if resolution.record else None,
                "failed_sources": resolution.failed_sources,
            }
        )
    elif resolution.record is not None:
        print_record(resolution.record)
    else:
        console.print(f"[yellow]{name}[/yellow]: {resolution.status.value}")
        for source in resolution.failed_sources:
            console.print(f"  [red]✗[/red] {source}")

    if resolution.status is not ResolutionStatus.FOUND:
        raise typer.Exit(code=1)


@app.command("search")
def search(
    keyword: str = typer.Argument(..., help="Case-insensitive substring"),
    no_studio: bool = typer.Option(False, "--no-studio", help="Skip studio-only documents"),
    limit: int = typer.Option(50, "--limit", "-n"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Search flag names on every platform."""
    records = _run(lambda s: s.search(keyword, include_studio=not no_studio))
    if json_out:
        print_json([r.to_dict() for r in records])
        return
    print_records(records, title=f"Flags matching '{keyword}'", limit=limit)


@app.command("list")
def list_flags(
    platform: list[str] | None = typer.Option(None, "--platform", "-p", help="Repeatable"),
    no_studio: bool = typer.Option(False, "--no-studio"),
    limit: int = typer.Option(50, "--limit", "-n"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List every flag currently published (no history is kept)."""
    records = _run(lambda s: s.all_entries(platform or None, include_studio=not no_studio))
    if json_out:
        print_json([r.to_dict() for r in records])
        return
    print_records(records, title="Current flags", limit=limit)


@app.command("compare")
def compare(
    name: str = typer.Argument(..., help="Exact flag name"),
    platforms: str | None = typer.Option(None, "--platforms", help="Comma-separated platform ids"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Compare one flag's value across platforms."""
    comparison = _run(lambda s: s.compare(name, split_csv(platforms)))

    if not comparison.found:
        fail(f"flag {name} not found on any of the requested platforms")

    if json_out:
        print_json(
            {
                "flag": name,
                "values": {e.platform: e.record.value for e in comparison.found},
                "missing": comparison.missing,
                "consistent": comparison.consistent,
                "numeric_spread": comparison.numeric_spread,
            }
        )
        return

    for entry in comparison.entries:
        value = format_value(entry.record.value) if entry.record else "[dim]absent[/dim]"
        console.print(f"{entry.platform:<18} {value}")
    if comparison.consistent:
        console.print("[green]✓ same value on every platform[/green]")
    else:
        console.print("[yellow]⚠ values differ between platforms[/yellow]")
        if comparison.has_enabled:
            console.print("  • enabled on some platforms only")
        if comparison.numeric_spread:
            console.print(f"  • numeric values spread by {comparison.numeric_spread}")


@app.command("platforms")
def platforms() -> None:
    """Show the platform catalog in resolution order."""
    catalog = SourceCatalog(get_settings().base_url)
    for index, descriptor in enumerate(catalog, start=1):
        marker = " [dim](studio)[/dim]" if descriptor.studio_only else ""
        console.print(f"{index}. {descriptor.platform_id}{marker}  {descriptor.document_url}")


# ------------------------------------------------------------------ #
# Reporting Commands
# ------------------------------------------------------------------ #


@app.command("check")
def check(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
    fmt: str | None = typer.Option(None, "--format", "-f", help="json or txt (default: file suffix)"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Check a flag list file for invalid, outdated and replaced flags."""
    list_format = (fmt or path.suffix.lstrip(".")).lower()
    if list_format not in LIST_FORMATS:
        fail(f"cannot infer list format from {path.name}; pass --format json|txt")

    try:
        content = path.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        fail("file is not valid UTF-8")
    names = parse_flag_list(content, list_format)
    if not names:
        fail("no valid flags found in the file")

    checks = _run(lambda s: s.check(names))
    if json_out:
        print_json(export_checks(checks))
        return

    counts = summarize(checks)
    console.print(
        f"Checked {counts['total']}: "
        f"[green]{counts['valid']} valid[/green], "
        f"[yellow]{counts['outdated']} outdated[/yellow], "
        f"[red]{counts['invalid']} invalid[/red], "
        f"[cyan]{counts['replaced']} replaced[/cyan]"
    )
    for item in checks:
        if item.status.value == "replaced":
            console.print(f"  {item.name} → {item.replacement}")
        elif item.status.value != "valid":
            console.print(f"  {item.name} ({item.status.value})")


@app.command("stats")
def stats(
    no_studio: bool = typer.Option(False, "--no-studio"),
    patterns: int = typer.Option(5, "--patterns", help="Naming patterns to show"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Summarize the current flag set."""
    records = _run(lambda s: s.all_entries(include_studio=not no_studio))
    result = compute_stats(records)
    if json_out:
        print_json(result.to_dict())
        return

    console.print(f"[bold]{result.total}[/bold] flags")
    console.print("[bold]Types[/bold]")
    for line in format_distribution(result.type_distribution):
        console.print(f"  {line}")
    console.print("[bold]Platforms[/bold]")
    for line in format_distribution(result.platform_distribution):
        console.print(f"  {line}")
    console.print("[bold]Values[/bold]")
    for value_type, count in result.value_types.items():
        console.print(f"  {value_type}: {count}")
    if patterns > 0 and result.patterns:
        console.print("[bold]Common words[/bold]")
        for word, count in result.patterns[:patterns]:
            console.print(f"  {word}: {count}")


@app.command("export")
def export(
    fmt: str = typer.Argument(..., help="json, csv or md"),
    keyword: str | None = typer.Option(None, "--filter", help="Only names containing this"),
    platform: str | None = typer.Option(None, "--platform", "-p"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write to file instead of stdout"),
) -> None:
    """Export flags as JSON, CSV or Markdown."""
    platforms = [platform] if platform else None
    if keyword:
        records = _run(lambda s: s.search(keyword, platforms=platforms))
    else:
        records = _run(lambda s: s.all_entries(platforms))
    if not records:
        fail("no flags matched")

    try:
        content = export_records(records, fmt)
    except FlagwatchError as e:
        fail(e.message)

    if output is not None:
        output.write_text(content, encoding="utf-8")
        console.print(f"[green]✓[/green] wrote {len(records)} flags to {output}")
    else:
        typer.echo(content, nl=False)


# ------------------------------------------------------------------ #
# Conversion Commands
# ------------------------------------------------------------------ #


@app.command("convert")
def convert(
    text: str = typer.Argument(..., help="JSON object or comma-separated key=value pairs"),
    fmt: str = typer.Option("json", "--format", "-f", help="json, ini or clientsettings"),
) -> None:
    """Convert flag assignments between formats."""
    flags = parse_flag_input(text)
    if not flags:
        fail("no valid flags found in input")
    try:
        converted = convert_flags(flags, fmt)
    except FlagwatchError as e:
        fail(e.message)
    typer.echo(converted)


@app.command("optimize")
def optimize(
    category: str = typer.Argument(..., help="fps, latency, memory or all"),
    detailed: bool = typer.Option(False, "--detailed", "-d", help="Explain each flag"),
    fmt: str | None = typer.Option(
        None, "--format", "-f", help="Print the settings as json, ini or clientsettings"
    ),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Recommended flag values for a performance goal."""
    try:
        table = recommendations_for(category)
        if fmt is not None:
            typer.echo(convert_flags(table, fmt))
            return
    except FlagwatchError as e:
        fail(e.message)

    recommendations = _run(lambda s: s.recommend(category))
    if json_out:
        print_json({"category": category.lower(), "flags": [r.to_dict() for r in recommendations]})
        return

    table_view = Table(title=f"Optimization: {category.upper()}")
    table_view.add_column("Flag", style="cyan")
    table_view.add_column("Recommended")
    table_view.add_column("Current")
    if detailed:
        table_view.add_column("Explanation")
    for item in recommendations:
        current = format_value(item.current.value) if item.current else "[dim]not published[/dim]"
        row = [item.name, format_value(item.recommended), current]
        if detailed:
            row.append(item.explanation or "-")
        table_view.add_row(*row)
    console.print(table_view)
    console.print("[dim]Some settings only take effect after a restart.[/dim]")
