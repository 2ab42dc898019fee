"""Running play/skip/duration totals over parsed records."""
from __future__ import annotations

from dataclasses import replace
from typing import Iterable

from ..models import ParseStats, PlayRecord


def fold_stats(stats: ParseStats, record: PlayRecord) -> ParseStats:
    """Return ``stats`` updated with one more record."""
    return replace(
        stats,
        total_tracks=stats.total_tracks + 1,
        played_count=stats.played_count + (0 if record.skipped else 1),
        skipped_count=stats.skipped_count + (1 if record.skipped else 0),
        total_duration_seconds=stats.total_duration_seconds + record.duration_seconds,
    )


class StatsAccumulator:
    """Fold records one at a time; ``result`` is the current ParseStats."""

    def __init__(self, initial: ParseStats | None = None) -> None:
        self._stats = initial or ParseStats()

    def add(self, record: PlayRecord) -> ParseStats:
        self._stats = fold_stats(self._stats, record)
        return self._stats

    def extend(self, records: Iterable[PlayRecord]) -> ParseStats:
        for record in records:
            self.add(record)
        return self._stats

    @property
    def result(self) -> ParseStats:
        return self._stats

    def __len__(self) -> int:
        return self._stats.total_tracks
