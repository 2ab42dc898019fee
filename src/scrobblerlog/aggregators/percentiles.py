"""Percentile summary of track durations."""
from __future__ import annotations

import math

from ..models import PlayRecord


def _percentile(sorted_values: list[int], p: float) -> float:
    """Nearest-rank percentile for a pre-sorted list."""
    if not sorted_values:
        return 0.0
    n = len(sorted_values)
    rank = math.ceil(p / 100 * n) - 1
    return float(sorted_values[max(0, min(rank, n - 1))])


class Percentiles:
    """Collect track durations (seconds) and summarise them.

    Usage::

        p = Percentiles()
        for record in records:
            p.add(record)

        print(p.summary())
        # {'p50': 214.0, 'p90': 341.0, 'p95': 402.0, 'p99': 611.0,
        #  'min': 31.0, 'max': 1240.0, 'mean': 232.7, 'count': 418.0}
    """

    def __init__(self) -> None:
        self._values: list[int] = []
        self._dirty = True
        self._sorted: list[int] = []

    def add(self, record: PlayRecord) -> None:
        self._values.append(record.duration_seconds)
        self._dirty = True

    def _ensure_sorted(self) -> None:
        if self._dirty:
            self._sorted = sorted(self._values)
            self._dirty = False

    def percentile(self, p: float) -> float:
        self._ensure_sorted()
        return _percentile(self._sorted, p)

    def summary(self, percentiles: list[float] | None = None) -> dict[str, float]:
        self._ensure_sorted()
        ps = percentiles or [50, 90, 95, 99]
        result: dict[str, float] = {f"p{int(p)}": _percentile(self._sorted, p) for p in ps}
        if self._sorted:
            result["min"] = float(self._sorted[0])
            result["max"] = float(self._sorted[-1])
            result["mean"] = sum(self._sorted) / len(self._sorted)
        result["count"] = float(len(self._sorted))
        return result

    def __len__(self) -> int:
        return len(self._values)
