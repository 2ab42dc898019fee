"""Header parser for the three leading lines of a .scrobbler.log file.

    #AUDIOSCROBBLER/1.1
    #TZ/UNKNOWN
    #CLIENT/Rockbox h3xx $Revision$
"""
from __future__ import annotations

import logging
import re

from ..errors import MalformedHeader, MissingHeaderLine, UnsupportedVersion
from ..models import LogHeader
from .base import FormatVersion

logger = logging.getLogger(__name__)

_VERSION_RE = re.compile(r"#AUDIOSCROBBLER/(?P<version>[0-9]+\.[0-9]+)")
_TZ_RE = re.compile(r"#TZ/(?P<tz>UNKNOWN|UTC)")
_CLIENT_RE = re.compile(r"#CLIENT/(?P<client>.*)")

# Windows editors prefix UTF-8 files with a byte order mark.
_BOM = "\ufeff"


def _strip_eol(line: str) -> str:
    return line.rstrip("\r\n")


def parse_version(line: str | None) -> FormatVersion:
    if line is None:
        raise MissingHeaderLine("Version")
    line = line.lstrip(_BOM)
    m = _VERSION_RE.match(line)
    if not m:
        raise MalformedHeader("Version", _strip_eol(line), "#AUDIOSCROBBLER/<major>.<minor>")
    try:
        return FormatVersion(m.group("version"))
    except ValueError:
        raise UnsupportedVersion(m.group("version"), FormatVersion.known()) from None


def parse_timezone_marker(line: str | None) -> bool:
    """Return True for ``#TZ/UTC``, False for ``#TZ/UNKNOWN``."""
    if line is None:
        raise MissingHeaderLine("Timezone")
    m = _TZ_RE.match(line)
    if not m:
        raise MalformedHeader("Timezone", _strip_eol(line), "#TZ/UNKNOWN or #TZ/UTC")
    return m.group("tz") == "UTC"


def parse_client(line: str | None) -> str:
    if line is None:
        raise MissingHeaderLine("Client")
    m = _CLIENT_RE.match(_strip_eol(line))
    if not m:
        raise MalformedHeader("Client", _strip_eol(line), "#CLIENT/<client name>")
    return m.group("client")


def parse_header(line1: str | None, line2: str | None, line3: str | None) -> LogHeader:
    """Validate the header lines and build a LogHeader.

    A ``None`` argument means the stream ended before that line.
    """
    version = parse_version(line1)
    timezone_known = parse_timezone_marker(line2)
    client = parse_client(line3)
    logger.debug(
        "Header: version=%s tz=%s client=%r",
        version.value, "UTC" if timezone_known else "UNKNOWN", client,
    )
    return LogHeader(format_version=version, timezone_known=timezone_known, client=client)
