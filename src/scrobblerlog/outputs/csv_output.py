"""Render play records as CSV."""
from __future__ import annotations

import csv
import io
from typing import Iterable

from ..models import PlayRecord

CSV_COLUMNS = [
    "artist",
    "album",
    "track",
    "album_position",
    "duration_seconds",
    "skipped",
    "listen_time",
    "musicbrainz_id",
]


class CsvOutput:
    """Render records as a CSV string with a header row.

    Absent optional fields are written as empty cells.
    """

    @property
    def name(self) -> str:
        return "csv"

    def render(self, records: Iterable[PlayRecord]) -> str:
        buf = io.StringIO()
        writer = csv.DictWriter(buf, fieldnames=CSV_COLUMNS, lineterminator="\n")
        writer.writeheader()
        for record in records:
            row = record.to_dict()
            writer.writerow({k: "" if row[k] is None else row[k] for k in CSV_COLUMNS})
        return buf.getvalue()
