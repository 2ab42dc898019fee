"""Select play records by listen time."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Iterator

from ..models import PlayRecord

# Formats accepted for --since/--until, tried in order
_TIMESTAMP_FORMATS: list[str] = [
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%dT%H:%M",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d",
]


def parse_bound(raw: str) -> datetime | None:
    """Parse a user-supplied bound as UTC. Returns None if unrecognised."""
    raw = raw.strip()
    for fmt in _TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(raw, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    return None


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


class TimeRangeFilter:
    """Keep records whose ``listen_time`` falls within [start, end].

    Either bound may be ``None`` (open interval). Naive bounds are taken
    to be UTC.
    """

    def __init__(self, start: datetime | None = None, end: datetime | None = None) -> None:
        self.start = _as_utc(start) if start else None
        self.end = _as_utc(end) if end else None

    def matches(self, record: PlayRecord) -> bool:
        ts = record.listen_time
        if self.start and ts < self.start:
            return False
        if self.end and ts > self.end:
            return False
        return True

    def filter(self, records: Iterable[PlayRecord]) -> Iterator[PlayRecord]:
        for record in records:
            if self.matches(record):
                yield record
