"""Immutable value types produced by the parser."""
from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any

from .parsers.base import FormatVersion


@dataclass(frozen=True)
class LogHeader:
    """The three header lines of a scrobbler log.

    Attributes:
        format_version: Declared format version (``#AUDIOSCROBBLER/x.y``).
        timezone_known: True when the log declares ``#TZ/UTC``.
        client:         Free-text client name, possibly empty.
    """

    format_version: FormatVersion
    timezone_known: bool
    client: str


@dataclass(frozen=True)
class PlayRecord:
    """One listening event: a track played to completion or skipped."""

    artist: str
    track: str
    duration_seconds: int
    skipped: bool
    listen_time: datetime
    album: str | None = None
    album_position: int | None = None
    musicbrainz_id: str | None = None

    @property
    def rating(self) -> str:
        return "S" if self.skipped else "L"

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["listen_time"] = self.listen_time.isoformat()
        return d


@dataclass(frozen=True)
class ParseStats:
    total_tracks: int = 0
    played_count: int = 0
    skipped_count: int = 0
    total_duration_seconds: int = 0


@dataclass(frozen=True)
class ParseResult:
    """Everything a successful parse returns."""

    header: LogHeader
    records: tuple[PlayRecord, ...]
    stats: ParseStats

    @property
    def client(self) -> str:
        return self.header.client

    @property
    def format_version(self) -> str:
        return self.header.format_version.value
