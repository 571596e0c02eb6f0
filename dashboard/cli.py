import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from dashboard.config import settings
from dashboard.core.exceptions import DashboardError
from dashboard.schemas.status import WindowSelection
from dashboard.services.history_client import HistoryClient
from dashboard.services.refresh import CycleResult, RefreshController
from dashboard.services.report import (
    EXPORT_FORMATS,
    build_report,
    display_stats,
    export_filename,
    format_datetime,
    format_duration,
    render,
)

console = Console()
cli_app = typer.Typer(name="connectivity-dashboard", help="Connectivity history analytics CLI")


def _run_async(coro):
    """Run async code from sync CLI context."""
    return asyncio.run(coro)


def _selection(hours: float | None, custom_hours: int, custom_minutes: int) -> WindowSelection:
    if custom_hours or custom_minutes:
        return WindowSelection(hours=custom_hours, minutes=custom_minutes)
    return WindowSelection(preset_hours=hours or settings.default_window_hours)


async def _load(url: str, selection: WindowSelection) -> CycleResult:
    history = HistoryClient(base_url=url, history_path=settings.history_path)
    try:
        controller = RefreshController(history, page_size=settings.page_size, window=selection)
        return await controller.set_window(selection)
    finally:
        await history.close()


def _load_or_exit(url: str, selection: WindowSelection) -> CycleResult:
    try:
        return _run_async(_load(url, selection))
    except DashboardError as exc:
        console.print(f"[bold red]{exc.message}[/bold red]")
        raise typer.Exit(code=1)


@cli_app.command("summary")
def summary(
    hours: float = typer.Option(None, "--hours", help="Preset window length in hours"),
    custom_hours: int = typer.Option(0, "--custom-hours", help="Custom window: hours part"),
    custom_minutes: int = typer.Option(0, "--custom-minutes", help="Custom window: minutes part"),
    url: str = typer.Option(settings.history_base_url, "--url", help="History backend base URL"),
):
    """Fetch the history once and print status, statistics and outages."""
    result = _load_or_exit(url, _selection(hours, custom_hours, custom_minutes))

    status = result.status
    if status.state == "online":
        console.print(f"\n  Status: [bold green]Online[/bold green]  (latency {status.latency_ms:g} ms)")
    elif status.state == "offline":
        console.print("\n  Status: [bold red]Offline[/bold red]")
    else:
        console.print("\n  Status: [dim]No data[/dim]")

    shown = display_stats(result.stats)
    console.print(f"  Total outages:        {shown.outage_count}")
    console.print(f"  Total outage time:    {shown.total_outage_duration}")
    console.print(f"  Average outage time:  {shown.average_outage_duration}")
    console.print(f"  Average latency:      {shown.average_latency}\n")

    if not result.intervals:
        console.print("[dim]No outages in this window.[/dim]")
        return

    table = Table(title="Outages")
    table.add_column("Start", style="cyan")
    table.add_column("End")
    table.add_column("Duration", style="red")

    for interval in result.intervals:
        end = format_datetime(interval.end) + (" (ongoing)" if interval.is_open else "")
        table.add_row(format_datetime(interval.start), end, format_duration(interval.duration))

    console.print(table)


@cli_app.command("export")
def export(
    fmt: str = typer.Option("csv", "--format", help="Report format: pdf, csv, txt or html"),
    output_dir: Path = typer.Option(Path("."), "--output-dir", help="Directory to write the report to"),
    hours: float = typer.Option(None, "--hours", help="Preset window length in hours"),
    custom_hours: int = typer.Option(0, "--custom-hours", help="Custom window: hours part"),
    custom_minutes: int = typer.Option(0, "--custom-minutes", help="Custom window: minutes part"),
    url: str = typer.Option(settings.history_base_url, "--url", help="History backend base URL"),
):
    """Write an outage report file named with today's date."""
    if fmt not in EXPORT_FORMATS:
        console.print(f"[yellow]Unknown format '{fmt}'. Choose one of: {', '.join(EXPORT_FORMATS)}[/yellow]")
        raise typer.Exit(code=1)

    result = _load_or_exit(url, _selection(hours, custom_hours, custom_minutes))
    report = build_report(result.stats, result.intervals, result.evaluated_at)

    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / export_filename(fmt, result.evaluated_at.date())
    path.write_bytes(render(report, fmt))

    console.print(f"[bold green]Report written:[/bold green] {path}")


def main():
    cli_app()


if __name__ == "__main__":
    main()
