""".scrobbler.log parser — drives header, timezone and track-line stages.

Usage::

    with open_log("/media/player/.scrobbler.log") as lines:
        parser = ScrobblerLogParser(lines).set_timezone("Europe/London")
        records = parser.parse()
        print(parser.client, parser.stats.total_tracks)

Any error is fatal: the parser moves to ``ParserState.FAILED`` and no
partial records are exposed.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import timezone, tzinfo
from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator

from .aggregators.stats import fold_stats
from .config import ParserOptions
from .errors import EmptyLog, ParserStateError, ResourceUnavailable, TimezoneRequired
from .models import LogHeader, ParseResult, ParseStats, PlayRecord
from .parsers.header import parse_header
from .parsers.track import parse_line
from .timezones import load_timezone

logger = logging.getLogger(__name__)

_HEADER_LINES = 3


class ParserState(str, Enum):
    CREATED = "created"
    HEADER_PARSED = "header_parsed"
    AWAITING_TIMEZONE = "awaiting_timezone"
    TIMEZONE_RESOLVED = "timezone_resolved"
    PARSING = "parsing"
    DONE = "done"
    FAILED = "failed"


_PRE_PARSE_STATES = frozenset({
    ParserState.CREATED,
    ParserState.HEADER_PARSED,
    ParserState.AWAITING_TIMEZONE,
    ParserState.TIMEZONE_RESOLVED,
})


class ScrobblerLogParser:
    """Parse one scrobbler log from an iterable of text lines.

    Args:
        lines:    Any iterable of lines (an open file works). Line
                  terminators are tolerated.
        timezone: Optional override, used only when the log declares
                  ``#TZ/UNKNOWN``. Same as calling ``set_timezone``.
        options:  Duration and timestamp policies.
    """

    def __init__(
        self,
        lines: Iterable[str],
        *,
        timezone: str | tzinfo | None = None,
        options: ParserOptions | None = None,
    ) -> None:
        self._lines: Iterator[str] = iter(lines)
        self._options = options or ParserOptions()
        self._override: tzinfo | None = None
        self._header: LogHeader | None = None
        self._tz: tzinfo | None = None
        self._records: tuple[PlayRecord, ...] = ()
        self._stats = ParseStats()
        self._state = ParserState.CREATED
        if timezone is not None:
            self.set_timezone(timezone)

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def set_timezone(self, name: str | tzinfo) -> "ScrobblerLogParser":
        """Set the device timezone for logs that declare ``#TZ/UNKNOWN``.

        Raises UnknownTimezone for names missing from the tz database.
        """
        if self._state not in _PRE_PARSE_STATES:
            raise ParserStateError(f"cannot set timezone in state {self._state.value}")
        self._override = load_timezone(name)
        if self._header is not None:
            self._resolve_timezone()
        return self

    def read_header(self) -> LogHeader:
        """Consume and validate the three header lines."""
        if self._state is not ParserState.CREATED:
            raise ParserStateError(f"header already read (state {self._state.value})")
        try:
            lines = [next(self._lines, None) for _ in range(_HEADER_LINES)]
            self._header = parse_header(*lines)
        except (OSError, UnicodeDecodeError) as exc:
            self._state = ParserState.FAILED
            raise _read_failure(exc) from exc
        except Exception:
            self._state = ParserState.FAILED
            raise
        self._state = ParserState.HEADER_PARSED
        self._resolve_timezone()
        return self._header

    def _resolve_timezone(self) -> None:
        header = self.header
        if header.timezone_known:
            if self._override is not None and self._override is not timezone.utc:
                logger.warning("Log declares #TZ/UTC; ignoring timezone override %s", self._override)
            self._tz = timezone.utc
        else:
            self._tz = self._override
        self._state = (
            ParserState.TIMEZONE_RESOLVED if self._tz is not None else ParserState.AWAITING_TIMEZONE
        )
        logger.debug("Effective timezone: %s", self._tz)

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def parse(self) -> list[PlayRecord]:
        """Parse every track line and return the records in file order.

        Blank lines are accepted only at the end of the stream; a blank
        line followed by another track line fails like any short line.
        """
        if self._state is ParserState.CREATED:
            self.read_header()
        if self._state is ParserState.AWAITING_TIMEZONE:
            self._state = ParserState.FAILED
            raise TimezoneRequired()
        header, tz = self._header, self._tz
        if self._state is not ParserState.TIMEZONE_RESOLVED or header is None or tz is None:
            raise ParserStateError(f"cannot parse in state {self._state.value}")

        self._state = ParserState.PARSING
        records: list[PlayRecord] = []
        stats = ParseStats()
        blank: tuple[int, str] | None = None
        try:
            for line_no, raw in enumerate(self._lines, start=_HEADER_LINES + 1):
                if not raw.rstrip("\r\n"):
                    blank = blank or (line_no, raw)
                    continue
                if blank is not None:
                    parse_line(blank[1], header, tz, line_no=blank[0], options=self._options)
                record = parse_line(raw, header, tz, line_no=line_no, options=self._options)
                records.append(record)
                stats = fold_stats(stats, record)
            if not records:
                raise EmptyLog()
        except (OSError, UnicodeDecodeError) as exc:
            self._state = ParserState.FAILED
            raise _read_failure(exc) from exc
        except Exception:
            self._state = ParserState.FAILED
            raise

        self._records = tuple(records)
        self._stats = stats
        self._state = ParserState.DONE
        logger.debug(
            "Parsed %d tracks (%d played, %d skipped)",
            stats.total_tracks, stats.played_count, stats.skipped_count,
        )
        return records

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def _require_done(self) -> None:
        if self._state is not ParserState.DONE:
            raise ParserStateError(f"parse() has not completed (state {self._state.value})")

    @property
    def state(self) -> ParserState:
        return self._state

    @property
    def header(self) -> LogHeader:
        if self._header is None:
            raise ParserStateError("header has not been read")
        return self._header

    @property
    def effective_timezone(self) -> tzinfo | None:
        return self._tz

    @property
    def client(self) -> str:
        self._require_done()
        return self.header.client

    @property
    def format_version(self) -> str:
        self._require_done()
        return self.header.format_version.value

    @property
    def stats(self) -> ParseStats:
        self._require_done()
        return self._stats

    @property
    def records(self) -> tuple[PlayRecord, ...]:
        self._require_done()
        return self._records

    def result(self) -> ParseResult:
        self._require_done()
        return ParseResult(header=self.header, records=self._records, stats=self._stats)


def _read_failure(exc: Exception) -> ResourceUnavailable:
    if isinstance(exc, UnicodeDecodeError):
        return ResourceUnavailable(f"scrobbler log is not valid {exc.encoding} text: {exc.reason}")
    return ResourceUnavailable(f"scrobbler log could not be read: {exc}")


@contextmanager
def open_log(path: str | Path, encoding: str = "utf-8-sig") -> Iterator[Iterator[str]]:
    """Open a log file for reading; the file is closed on every exit path."""
    try:
        fh = open(path, encoding=encoding, newline="")
    except OSError as exc:
        raise ResourceUnavailable(f"scrobbler log file {str(path)!r} can not be opened: {exc}") from exc
    with fh:
        yield iter(fh)


def parse_file(
    path: str | Path,
    timezone: str | tzinfo | None = None,
    options: ParserOptions | None = None,
    encoding: str = "utf-8-sig",
) -> ParseResult:
    """Open, parse and close ``path`` in one call."""
    with open_log(path, encoding=encoding) as lines:
        parser = ScrobblerLogParser(lines, timezone=timezone, options=options)
        parser.parse()
        return parser.result()
