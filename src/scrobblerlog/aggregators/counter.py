"""Count play records by artist, album or track."""
from __future__ import annotations

from collections import Counter as _Counter

from ..models import PlayRecord

COUNTABLE_FIELDS = ("artist", "album", "track")


class Counter:
    """Count occurrences of a record attribute across play records.

    Records whose attribute is None (e.g. no album) count as "unknown".
    Pass ``include_skipped=False`` to count only tracks listened to.
    """

    def __init__(self, field: str, include_skipped: bool = True) -> None:
        if field not in COUNTABLE_FIELDS:
            raise ValueError(f"cannot count by {field!r}; choose one of {', '.join(COUNTABLE_FIELDS)}")
        self._field = field
        self._include_skipped = include_skipped
        self._counts: _Counter[str] = _Counter()

    def add(self, record: PlayRecord) -> None:
        if record.skipped and not self._include_skipped:
            return
        value = getattr(record, self._field)
        self._counts[value if value is not None else "unknown"] += 1

    def top(self, n: int = 10) -> list[tuple[str, int]]:
        return self._counts.most_common(n)

    @property
    def total(self) -> int:
        return sum(self._counts.values())
