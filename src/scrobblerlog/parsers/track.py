"""Track line parser.

Each body line holds tab-separated fields:

    artist  album  track  position  duration  rating  timestamp  [mbid]

The MusicBrainz ID column exists only in format version 1.1.
"""
from __future__ import annotations

import logging
import re
from datetime import tzinfo

from ..config import ParserOptions
from ..errors import (
    FieldCountMismatch,
    InvalidDuration,
    InvalidSkipFlag,
    MissingArtist,
    MissingDuration,
    MissingOrInvalidTimestamp,
    MissingTrack,
)
from ..models import LogHeader, PlayRecord
from ..timezones import is_numeric, resolve_listen_time, whole_part

logger = logging.getLogger(__name__)

_DEFAULT_OPTIONS = ParserOptions()
_WHOLE_SECONDS_RE = re.compile(r"^\d+$")


def _optional(value: str) -> str | None:
    return value if value else None


def _album_position(value: str, line_no: int | None) -> int | None:
    if not value:
        return None
    try:
        return whole_part(value)
    except ValueError:
        logger.warning("Line %s: ignoring unusable album position %r", line_no, value)
        return None


def _duration(value: str, line_no: int | None, strict: bool) -> int:
    if not value:
        raise MissingDuration(line_no, "duration", value)
    if strict and not _WHOLE_SECONDS_RE.match(value):
        raise InvalidDuration(line_no, "duration", value)
    if is_numeric(value):
        try:
            return whole_part(value)
        except ValueError:
            raise InvalidDuration(line_no, "duration", value) from None
    logger.warning("Line %s: non-numeric duration %r counted as 0 seconds", line_no, value)
    return 0


def _skipped(value: str, line_no: int | None) -> bool:
    if value == "S":
        return True
    if value == "L":
        return False
    raise InvalidSkipFlag(line_no, "rating", value)


def parse_line(
    raw_line: str,
    header: LogHeader,
    tz: tzinfo,
    *,
    line_no: int | None = None,
    options: ParserOptions = _DEFAULT_OPTIONS,
) -> PlayRecord:
    """Validate one body line and build a PlayRecord.

    Raises a LineError subclass on the first invalid field.
    """
    line = raw_line.rstrip("\r\n")
    fields = line.split("\t")
    version = header.format_version
    if len(fields) != version.field_count:
        raise FieldCountMismatch(line_no, line, version.field_count, len(fields))

    artist, album, track, position, duration, rating, timestamp = fields[:7]

    if not artist:
        raise MissingArtist(line_no, "artist", artist)
    if not track:
        raise MissingTrack(line_no, "track", track)

    duration_seconds = _duration(duration, line_no, options.strict_duration)
    skipped = _skipped(rating, line_no)

    if not timestamp:
        raise MissingOrInvalidTimestamp(line_no, "timestamp", timestamp)
    try:
        listen_time = resolve_listen_time(timestamp, tz, options.timestamp_mode)
    except ValueError:
        raise MissingOrInvalidTimestamp(line_no, "timestamp", timestamp) from None

    musicbrainz_id = None
    if version.has_musicbrainz_id:
        musicbrainz_id = _optional(fields[7].rstrip())

    return PlayRecord(
        artist=artist,
        album=_optional(album),
        track=track,
        album_position=_album_position(position, line_no),
        duration_seconds=duration_seconds,
        skipped=skipped,
        listen_time=listen_time,
        musicbrainz_id=musicbrainz_id,
    )
