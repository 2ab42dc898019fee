"""Regex search over the text fields of play records."""
from __future__ import annotations

import re

from ..models import PlayRecord

_TEXT_FIELDS = ("artist", "album", "track")


class RegexSearch:
    """Match records whose artist, album or track name matches a pattern.

    Pass ``fields`` to restrict matching, e.g. ``fields=["artist"]``.
    """

    def __init__(
        self,
        pattern: str,
        flags: int = re.IGNORECASE,
        fields: list[str] | None = None,
    ) -> None:
        self._regex = re.compile(pattern, flags)
        self._fields = tuple(fields) if fields else _TEXT_FIELDS

    def matches(self, record: PlayRecord) -> bool:
        values = (getattr(record, f, None) for f in self._fields)
        return any(self._regex.search(v) for v in values if v)

    def filter(self, records: list[PlayRecord]) -> list[PlayRecord]:
        return [r for r in records if self.matches(r)]
