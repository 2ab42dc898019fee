"""Exception hierarchy for scrobbler log parsing.

Every failure is fatal to the current parse; nothing is recovered inside
the parser. Catch ``ScrobblerLogError`` to handle all of them.
"""
from __future__ import annotations


class ScrobblerLogError(Exception):
    """Base class for all scrobblerlog errors."""


class ResourceUnavailable(ScrobblerLogError, OSError):
    """The log file cannot be opened or read."""


class ParserStateError(ScrobblerLogError):
    """A parser method was called in a state that does not allow it."""


# ── Header stage ────────────────────────────────────────────────────────────


class HeaderError(ScrobblerLogError):
    """Base class for errors raised while reading the three header lines."""


class MissingHeaderLine(HeaderError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"{name} header does not exist in log file")


class MalformedHeader(HeaderError):
    def __init__(self, name: str, raw: str, expected: str) -> None:
        self.name = name
        self.raw = raw
        super().__init__(f"{name} header {raw!r} is malformed, expected {expected}")


class UnsupportedVersion(HeaderError):
    def __init__(self, version: str, known: list[str]) -> None:
        self.version = version
        self.known = known
        super().__init__(
            f"Log format version {version!r} is not in list of known versions. "
            f"Must be one of: {', '.join(known)}"
        )


class EmptyLog(ScrobblerLogError):
    def __init__(self) -> None:
        super().__init__("The log file contains no track information")


# ── Timezone stage ──────────────────────────────────────────────────────────


class TimezoneRequired(ScrobblerLogError):
    def __init__(self) -> None:
        super().__init__(
            "The log file does not specify a timezone. "
            "Supply one with set_timezone() or --timezone"
        )


class UnknownTimezone(ScrobblerLogError, ValueError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"The provided timezone {name!r} is not recognised")


# ── Track lines ─────────────────────────────────────────────────────────────


class LineError(ScrobblerLogError):
    """A body line failed validation.

    Attributes:
        line_no: 1-based line number within the file (header included).
        field:   Name of the offending column, or None for whole-line errors.
        raw:     The offending raw value.
    """

    reason = "invalid track line"

    def __init__(self, line_no: int | None, field: str | None, raw: str) -> None:
        self.line_no = line_no
        self.field = field
        self.raw = raw
        where = f"line {line_no}" if line_no is not None else "track line"
        column = f" [{field}]" if field else ""
        super().__init__(f"{where}{column}: {self.reason} (got {raw!r})")


class FieldCountMismatch(LineError):
    def __init__(self, line_no: int | None, raw: str, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        self.reason = f"expected {expected} tab-separated fields, found {actual}"
        super().__init__(line_no, None, raw)


class MissingArtist(LineError):
    reason = "log entry must contain an artist name"


class MissingTrack(LineError):
    reason = "log entry must contain a track name"


class MissingDuration(LineError):
    reason = "log entry must contain track duration"


class InvalidDuration(LineError):
    reason = "track duration must be a whole number of seconds"


class InvalidSkipFlag(LineError):
    reason = "skip flag must be 'S' (skipped) or 'L' (listened)"


class MissingOrInvalidTimestamp(LineError):
    reason = "log entry must specify the time that the track started playing"
