"""Timezone lookup and conversion of raw play timestamps to UTC.

Portable players that do not know their own timezone write the local
wall-clock time as seconds since the epoch. ``TimestampMode.WALLCLOCK``
undoes that: the value is read as a local time in the effective timezone
and converted to UTC. ``TimestampMode.EPOCH`` reads it as a true UTC epoch.
With a UTC timezone the two modes agree.
"""
from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta, timezone, tzinfo
from enum import Enum
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .errors import UnknownTimezone

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1)

# Signed integer or decimal, optionally surrounded by whitespace.
_NUMERIC_RE = re.compile(r"^\s*(?P<sign>[+-]?)(?:(?P<whole>\d+)(?:\.\d*)?|\.\d+)\s*$")


class TimestampMode(str, Enum):
    WALLCLOCK = "wallclock"
    EPOCH = "epoch"


def is_numeric(value: str) -> bool:
    return bool(_NUMERIC_RE.match(value))


def whole_part(value: str) -> int:
    """Integer part of a numeric string, without a float round-trip.

    Raises ValueError if ``value`` is not numeric or has more digits than
    ``int()`` will convert.
    """
    m = _NUMERIC_RE.match(value)
    if not m:
        raise ValueError(f"{value!r} is not numeric")
    return int(m.group("sign") + (m.group("whole") or "0"))


def load_timezone(name: str | tzinfo) -> tzinfo:
    """Resolve a timezone identifier against the IANA database.

    ``tzinfo`` instances are returned unchanged.
    """
    if isinstance(name, tzinfo):
        return name
    key = name.strip()
    if not key:
        raise UnknownTimezone(name)
    if key.upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(key)
    except (ZoneInfoNotFoundError, ValueError):
        raise UnknownTimezone(name) from None


def resolve_listen_time(
    raw: str,
    tz: tzinfo,
    mode: TimestampMode = TimestampMode.WALLCLOCK,
) -> datetime:
    """Convert a raw timestamp field into an aware UTC datetime.

    Raises ValueError if ``raw`` is not numeric or is out of range.
    """
    if tz is None:
        raise ValueError("a timezone is required to resolve play times")
    if not is_numeric(raw):
        raise ValueError(f"timestamp {raw!r} is not numeric")
    seconds = float(raw)
    try:
        if mode is TimestampMode.EPOCH:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        local = (_EPOCH + timedelta(seconds=seconds)).replace(tzinfo=tz)
        return local.astimezone(timezone.utc)
    except (OverflowError, OSError) as exc:
        raise ValueError(f"timestamp {raw!r} is out of range") from exc
