"""Shared pytest fixtures for scrobblerlog tests."""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from scrobblerlog.models import LogHeader, PlayRecord
from scrobblerlog.parsers.base import FormatVersion


@pytest.fixture()
def tmp_log_file(tmp_path: Path):
    """Return a factory that creates temporary .scrobbler.log files."""

    def _make(lines: list[str], name: str = ".scrobbler.log") -> Path:
        p = tmp_path / name
        p.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return p

    return _make


@pytest.fixture()
def utc_header_lines() -> list[str]:
    return ["#AUDIOSCROBBLER/1.0", "#TZ/UTC", "#CLIENT/TestPlayer"]


@pytest.fixture()
def unknown_tz_header_lines() -> list[str]:
    return ["#AUDIOSCROBBLER/1.1", "#TZ/UNKNOWN", "#CLIENT/Rockbox sansae200 $Revision$"]


@pytest.fixture()
def v10_body_lines() -> list[str]:
    return [
        "Artist A\tAlbum X\tFirst Song\t1\t180\tL\t1000000000",
        "Artist A\tAlbum X\tSecond Song\t2\t240\tS\t1000000200",
        "Artist B\t\tLoose Single\t\t200\tL\t1000000500",
    ]


@pytest.fixture()
def v11_body_lines() -> list[str]:
    return [
        "Artist A\tAlbum X\tFirst Song\t1\t180\tL\t1000000000\t8f3471b5-7e6a-48da-86a9-c1c07a0f47ae",
        "Artist B\tAlbum Y\tOther Song\tN/A\t300\tS\t1000000300\t",
    ]


@pytest.fixture()
def v10_header() -> LogHeader:
    return LogHeader(format_version=FormatVersion.V1_0, timezone_known=True, client="TestPlayer")


@pytest.fixture()
def v11_header() -> LogHeader:
    return LogHeader(format_version=FormatVersion.V1_1, timezone_known=True, client="TestPlayer")


@pytest.fixture()
def make_record():
    """Return a factory for PlayRecords with sensible defaults."""

    def _make(**overrides) -> PlayRecord:
        values = dict(
            artist="Artist",
            track="Track",
            duration_seconds=180,
            skipped=False,
            listen_time=datetime(2001, 9, 9, 1, 46, 40, tzinfo=timezone.utc),
            album="Album",
            album_position=1,
        )
        values.update(overrides)
        return PlayRecord(**values)

    return _make
