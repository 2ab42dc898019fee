"""scrobblerlog CLI — entry point.

Commands:
    scrobblerlog parse   <file>   Parse and display plays
    scrobblerlog stats   <file>   Play/skip totals and top artists
    scrobblerlog header  <file>   Show the log header only
"""
from __future__ import annotations

import json
import logging
import re
from datetime import datetime
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from .config import ParserOptions, settings
from .errors import ScrobblerLogError
from .models import ParseResult, PlayRecord
from .parser import ScrobblerLogParser, open_log, parse_file
from .timezones import TimestampMode

console = Console()
err_console = Console(stderr=True)

# ── Helpers ─────────────────────────────────────────────────────────────────


def _parse_dt(value: str) -> datetime:
    from .search.time_filter import parse_bound

    dt = parse_bound(value)
    if dt is None:
        raise click.BadParameter(f"Cannot parse date: {value!r}. Use ISO-8601 format.")
    return dt


def _load(
    file: Path,
    timezone: str,
    strict_duration: bool | None = None,
    timestamp_mode: str | None = None,
) -> ParseResult:
    """Parse ``file`` with CLI overrides layered over settings."""
    defaults = ParserOptions.from_settings()
    options = ParserOptions(
        strict_duration=defaults.strict_duration if strict_duration is None else strict_duration,
        timestamp_mode=TimestampMode(timestamp_mode) if timestamp_mode else defaults.timestamp_mode,
    )
    try:
        return parse_file(
            file,
            timezone=timezone or settings.default_timezone or None,
            options=options,
            encoding=settings.encoding,
        )
    except ScrobblerLogError as exc:
        raise click.ClickException(str(exc)) from exc


def _stream_line(record: PlayRecord) -> str:
    colour = "yellow" if record.skipped else "green"
    label = "SKIPPED" if record.skipped else "PLAYED"
    album = f" [dim]({escape(record.album)})[/dim]" if record.album else ""
    return (
        f"[dim]{record.listen_time:%Y-%m-%d %H:%M:%S}[/dim] [{colour}]{label:8}[/{colour}] "
        f"{escape(record.artist)} — {escape(record.track)}{album}"
    )


timezone_option = click.option(
    "--timezone", "-z", default="",
    help="Device timezone (IANA name) for logs that declare #TZ/UNKNOWN.",
)


# ── CLI root ─────────────────────────────────────────────────────────────────


@click.group()
@click.version_option(version="1.0.0", prog_name="scrobblerlog")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def main(verbose: bool) -> None:
    """scrobblerlog — read .scrobbler.log files from portable players."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# ── parse ────────────────────────────────────────────────────────────────────


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@timezone_option
@click.option(
    "--output", "-o", "output_fmt", default="table",
    type=click.Choice(["table", "stream", "json", "csv"], case_sensitive=False),
    help="Output format.",
    show_default=True,
)
@click.option("--limit", "-n", default=0, type=click.IntRange(min=0), help="Max plays to display (0 = all).")
@click.option("--since", default="", help="Only plays at or after this UTC time (ISO-8601).")
@click.option("--until", default="", help="Only plays at or before this UTC time (ISO-8601).")
@click.option("--match", "-m", "pattern", default="", help="Regex matched against artist, album and track.")
@click.option("--skipped/--played", "skipped", default=None, help="Only skipped or only played tracks.")
@click.option(
    "--strict-duration/--lenient-duration", default=None,
    help="Reject non-numeric durations instead of counting them as 0.",
)
@click.option(
    "--timestamp-mode", default=None,
    type=click.Choice([m.value for m in TimestampMode], case_sensitive=False),
    help="Read timestamps as local wall-clock seconds or as true UTC epoch.",
)
def parse(
    file: Path,
    timezone: str,
    output_fmt: str,
    limit: int,
    since: str,
    until: str,
    pattern: str,
    skipped: bool | None,
    strict_duration: bool | None,
    timestamp_mode: str | None,
) -> None:
    """Parse a .scrobbler.log file and display its plays.

    \b
    Examples:
      scrobblerlog parse .scrobbler.log
      scrobblerlog parse .scrobbler.log --timezone Europe/Berlin
      scrobblerlog parse .scrobbler.log --output json --since 2024-01-01
      scrobblerlog parse .scrobbler.log --match "radiohead" --played
    """
    result = _load(file, timezone, strict_duration, timestamp_mode)
    records: list[PlayRecord] = list(result.records)

    if since or until:
        from .search.time_filter import TimeRangeFilter

        time_filter = TimeRangeFilter(
            start=_parse_dt(since) if since else None,
            end=_parse_dt(until) if until else None,
        )
        records = list(time_filter.filter(records))
    if pattern:
        from .search.regex_search import RegexSearch

        try:
            records = RegexSearch(pattern).filter(records)
        except re.error as exc:
            raise click.BadParameter(f"Invalid regex {pattern!r}: {exc}", param_hint="--match") from exc
    if skipped is not None:
        records = [r for r in records if r.skipped is skipped]
    if limit:
        records = records[:limit]

    if output_fmt == "json":
        for record in records:
            click.echo(json.dumps(record.to_dict(), ensure_ascii=False))
        err_console.print(f"[dim]{len(records)} plays from {escape(file.name)}[/dim]")
        return

    if output_fmt == "csv":
        from .outputs.csv_output import CsvOutput

        click.echo(CsvOutput().render(records), nl=False)
        return

    if output_fmt == "table":
        from .visualization.tables import print_records_table

        print_records_table(
            records,
            title=f"{escape(file.name)} — {escape(result.client) or 'unknown client'} (v{result.format_version})",
            max_rows=0,
        )
    else:
        for record in records:
            console.print(_stream_line(record), highlight=False)

    console.print(f"\n[dim]{len(records)} of {result.stats.total_tracks} plays from {escape(file.name)}[/dim]")


# ── stats ────────────────────────────────────────────────────────────────────


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@timezone_option
@click.option(
    "--by", "-b", default="artist", show_default=True,
    type=click.Choice(["artist", "album", "track"], case_sensitive=False),
    help="Field to count plays by.",
)
@click.option("--top", "-t", default=10, type=click.IntRange(min=1), help="Show top N values.", show_default=True)
@click.option("--include-skipped", is_flag=True, help="Count skipped tracks in the top list.")
@click.option("--durations", "-d", is_flag=True, help="Show track length percentiles.")
@click.option("--chart", "-c", is_flag=True, help="Show a bar chart instead of a table.")
def stats(
    file: Path,
    timezone: str,
    by: str,
    top: int,
    include_skipped: bool,
    durations: bool,
    chart: bool,
) -> None:
    """Show play/skip totals and the most played artists, albums or tracks.

    \b
    Examples:
      scrobblerlog stats .scrobbler.log
      scrobblerlog stats .scrobbler.log --by album --top 5 --chart
      scrobblerlog stats .scrobbler.log --durations
    """
    from .aggregators.counter import Counter
    from .aggregators.percentiles import Percentiles
    from .visualization.tables import (
        print_bar_chart,
        print_counter_table,
        print_percentiles_table,
        print_stats_table,
    )

    result = _load(file, timezone)
    counter = Counter(field=by, include_skipped=include_skipped)
    percentiles = Percentiles()
    for record in result.records:
        counter.add(record)
        percentiles.add(record)

    console.print(
        f"\n[bold]File:[/bold] {escape(file.name)}  "
        f"[bold]Client:[/bold] {escape(result.client) or '-'}  "
        f"[bold]Version:[/bold] {result.format_version}"
    )
    print_stats_table(result.stats)

    if durations:
        print_percentiles_table(percentiles.summary())

    top_counts = counter.top(top)
    if chart:
        print_bar_chart(top_counts, title=f"Plays by {by}", width=40)
    else:
        print_counter_table(top_counts, title=f"Top {top} by {by}", value_col=by.title())


# ── header ───────────────────────────────────────────────────────────────────


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def header(file: Path) -> None:
    """Validate and show the three header lines of a log file."""
    from .visualization.tables import print_header_table

    try:
        with open_log(file, encoding=settings.encoding) as lines:
            log_header = ScrobblerLogParser(lines).read_header()
    except ScrobblerLogError as exc:
        raise click.ClickException(str(exc)) from exc
    print_header_table(log_header, title=escape(file.name))


if __name__ == "__main__":
    main()
