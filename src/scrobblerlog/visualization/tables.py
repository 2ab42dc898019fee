"""Rich-powered tables and bar charts for parsed scrobbler logs."""
from __future__ import annotations

from typing import Sequence

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..models import LogHeader, ParseStats, PlayRecord

_console = Console()


def format_duration(seconds: int) -> str:
    """Render seconds as ``H:MM:SS`` (or ``M:SS`` under an hour)."""
    hours, rem = divmod(max(seconds, 0), 3600)
    minutes, secs = divmod(rem, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def print_records_table(
    records: Sequence[PlayRecord],
    title: str = "Plays",
    max_rows: int = 100,
) -> None:
    """Render play records as a Rich table; skipped tracks are dimmed.

    Args:
        records:   Parsed records in file order.
        title:     Table title shown in the header.
        max_rows:  Hard cap, larger logs are truncated with a notice.
                   0 shows everything.
    """
    if not records:
        _console.print("[yellow]No plays to display.[/yellow]")
        return

    table = Table(title=title, box=box.ROUNDED, show_lines=False)
    table.add_column("Listened (UTC)", style="dim", no_wrap=True)
    table.add_column("Artist", overflow="fold", max_width=40)
    table.add_column("Album", overflow="fold", max_width=40)
    table.add_column("#", justify="right", width=3)
    table.add_column("Track", overflow="fold", max_width=50)
    table.add_column("Length", justify="right")
    table.add_column("", width=1)

    shown = records[:max_rows] if max_rows else records
    for r in shown:
        table.add_row(
            r.listen_time.strftime("%Y-%m-%d %H:%M:%S"),
            escape(r.artist),
            escape(r.album or ""),
            str(r.album_position) if r.album_position is not None else "",
            escape(r.track),
            format_duration(r.duration_seconds),
            r.rating,
            style="dim" if r.skipped else "",
        )

    _console.print(table)
    if max_rows and len(records) > max_rows:
        _console.print(
            f"[dim]... and {len(records) - max_rows} more rows (use --limit to adjust)[/dim]"
        )


def print_header_table(header: LogHeader, title: str = "Log header") -> None:
    table = Table(title=title, box=box.SIMPLE_HEAVY, show_header=False)
    table.add_column("Key", style="bold")
    table.add_column("Value", style="cyan")
    table.add_row("Format version", header.format_version.value)
    table.add_row("Timezone", "UTC" if header.timezone_known else "UNKNOWN")
    table.add_row("Client", escape(header.client) or "[dim](empty)[/dim]")
    _console.print(table)


def print_stats_table(stats: ParseStats, title: str = "Summary") -> None:
    """Render ParseStats as a two-column table."""
    table = Table(title=title, box=box.MINIMAL_DOUBLE_HEAD)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right", style="cyan")
    table.add_row("Tracks", str(stats.total_tracks))
    table.add_row("Played", str(stats.played_count))
    table.add_row("Skipped", str(stats.skipped_count))
    table.add_row("Total duration", format_duration(stats.total_duration_seconds))
    _console.print(table)


def print_counter_table(
    counts: list[tuple[str, int]],
    title: str = "Top values",
    value_col: str = "Value",
    count_col: str = "Plays",
) -> None:
    """Render a Counter.top() result as a Rich table."""
    table = Table(title=title, box=box.SIMPLE_HEAVY)
    table.add_column("#", style="dim", width=4)
    table.add_column(value_col)
    table.add_column(count_col, justify="right", style="cyan")

    for rank, (value, count) in enumerate(counts, start=1):
        table.add_row(str(rank), escape(value), str(count))

    _console.print(table)


def print_bar_chart(
    counts: list[tuple[str, int]],
    title: str = "Distribution",
    width: int = 40,
) -> None:
    """Print a bar chart scaled to the largest count."""
    if not counts:
        _console.print("[yellow]No data for chart.[/yellow]")
        return

    max_val = max(v for _, v in counts) or 1
    max_label = max(len(k) for k, _ in counts)

    _console.print(f"\n[bold]{title}[/bold]")
    for label, value in counts:
        bar = "█" * int(value / max_val * width)
        _console.print(
            f"  {escape(label):<{max_label}}  [green]{bar:<{width}}[/green]  [cyan]{value:>6}[/cyan]",
            markup=True,
            highlight=False,
        )
    _console.print()


def print_percentiles_table(summary: dict[str, float], title: str = "Track length") -> None:
    """Render a Percentiles.summary() dict; durations shown as M:SS."""
    table = Table(title=title, box=box.MINIMAL_DOUBLE_HEAD)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right", style="cyan")

    order = ["min", "p50", "p90", "p95", "p99", "max", "mean"]
    for key in order:
        if key in summary:
            table.add_row(key, format_duration(int(round(summary[key]))))
    if "count" in summary:
        table.add_row("count", str(int(summary["count"])))

    _console.print(table)
