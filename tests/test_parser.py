"""Tests for the ScrobblerLogParser state machine and file helpers."""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from scrobblerlog.errors import (
    EmptyLog,
    FieldCountMismatch,
    MissingHeaderLine,
    ParserStateError,
    ResourceUnavailable,
    ScrobblerLogError,
    TimezoneRequired,
    UnknownTimezone,
    UnsupportedVersion,
)
from scrobblerlog.parser import ParserState, ScrobblerLogParser, open_log, parse_file

EPOCH_1E9 = datetime(2001, 9, 9, 1, 46, 40, tzinfo=timezone.utc)


class TestScrobblerLogParser:
    def test_single_line_scenario(self, utc_header_lines) -> None:
        lines = utc_header_lines + ["Artist\tAlbum\tTrack\t3\t180\tL\t1000000000\n"]
        parser = ScrobblerLogParser(lines)
        records = parser.parse()

        assert len(records) == 1
        r = records[0]
        assert (r.artist, r.album, r.track) == ("Artist", "Album", "Track")
        assert r.album_position == 3
        assert r.duration_seconds == 180
        assert r.skipped is False
        assert r.listen_time == EPOCH_1E9

        stats = parser.stats
        assert stats.total_tracks == 1
        assert stats.played_count == 1
        assert stats.skipped_count == 0
        assert stats.total_duration_seconds == 180
        assert parser.client == "TestPlayer"
        assert parser.format_version == "1.0"
        assert parser.state is ParserState.DONE

    def test_stats_invariants(self, utc_header_lines, v10_body_lines) -> None:
        parser = ScrobblerLogParser(utc_header_lines + v10_body_lines)
        records = parser.parse()
        stats = parser.stats
        assert stats.total_tracks == stats.played_count + stats.skipped_count == 3
        assert stats.skipped_count == 1
        assert stats.total_duration_seconds == sum(r.duration_seconds for r in records) == 620

    def test_records_in_file_order(self, utc_header_lines, v10_body_lines) -> None:
        records = ScrobblerLogParser(utc_header_lines + v10_body_lines).parse()
        assert [r.track for r in records] == ["First Song", "Second Song", "Loose Single"]

    def test_header_utc_overrides_caller_timezone(self, utc_header_lines) -> None:
        lines = utc_header_lines + ["A\tB\tC\t1\t10\tL\t1000000000"]
        parser = ScrobblerLogParser(lines, timezone="America/New_York")
        records = parser.parse()
        assert parser.effective_timezone is timezone.utc
        assert records[0].listen_time == EPOCH_1E9

    def test_unknown_timezone_uses_override(self, unknown_tz_header_lines) -> None:
        lines = unknown_tz_header_lines + ["A\tB\tC\t1\t10\tL\t1000000000\t"]
        parser = ScrobblerLogParser(lines).set_timezone("America/New_York")
        records = parser.parse()
        # 01:46:40 local EDT (UTC-4)
        assert records[0].listen_time == datetime(2001, 9, 9, 5, 46, 40, tzinfo=timezone.utc)

    def test_set_timezone_after_header(self, unknown_tz_header_lines) -> None:
        lines = unknown_tz_header_lines + ["A\tB\tC\t1\t10\tL\t1000000000\t"]
        parser = ScrobblerLogParser(lines)
        parser.read_header()
        assert parser.state is ParserState.AWAITING_TIMEZONE
        parser.set_timezone("UTC")
        assert parser.state is ParserState.TIMEZONE_RESOLVED
        assert parser.parse()[0].listen_time == EPOCH_1E9

    def test_timezone_required_before_body_is_read(self, unknown_tz_header_lines) -> None:
        body = ["A\tB\tC\t1\t10\tL\t1000000000\t"]
        stream = iter(unknown_tz_header_lines + body)
        parser = ScrobblerLogParser(stream)
        with pytest.raises(TimezoneRequired):
            parser.parse()
        assert parser.state is ParserState.FAILED
        assert next(stream) == body[0]

    def test_unknown_timezone_name(self, utc_header_lines) -> None:
        with pytest.raises(UnknownTimezone):
            ScrobblerLogParser(utc_header_lines).set_timezone("Mars/Olympus_Mons")

    def test_bad_line_aborts_parse(self, utc_header_lines) -> None:
        lines = utc_header_lines + [
            "A\tB\tC\t1\t10\tL\t1000000000",
            "A\tB\tC\t1\t10\tL",
            "A\tB\tD\t1\t10\tL\t1000000100",
        ]
        parser = ScrobblerLogParser(lines)
        with pytest.raises(FieldCountMismatch) as exc_info:
            parser.parse()
        assert exc_info.value.line_no == 5
        assert parser.state is ParserState.FAILED
        with pytest.raises(ParserStateError):
            parser.records

    def test_six_field_line_scenario(self, utc_header_lines) -> None:
        parser = ScrobblerLogParser(utc_header_lines + ["Artist\tAlbum\tTrack\t3\t180\tL"])
        with pytest.raises(FieldCountMismatch):
            parser.parse()

    def test_v11_lenient_position_scenario(self, v11_body_lines) -> None:
        header = ["#AUDIOSCROBBLER/1.1", "#TZ/UTC", "#CLIENT/x"]
        records = ScrobblerLogParser(header + v11_body_lines).parse()
        assert records[1].album_position is None
        assert records[0].musicbrainz_id == "8f3471b5-7e6a-48da-86a9-c1c07a0f47ae"
        assert records[1].musicbrainz_id is None

    def test_header_only_is_empty_log(self, utc_header_lines) -> None:
        with pytest.raises(EmptyLog):
            ScrobblerLogParser(utc_header_lines).parse()

    def test_blank_lines_are_not_records(self, utc_header_lines) -> None:
        with pytest.raises(EmptyLog):
            ScrobblerLogParser(utc_header_lines + ["\n", "\r\n"]).parse()

    def test_truncated_header(self) -> None:
        parser = ScrobblerLogParser(["#AUDIOSCROBBLER/1.0\n", "#TZ/UTC\n"])
        with pytest.raises(MissingHeaderLine):
            parser.parse()
        assert parser.state is ParserState.FAILED

    def test_unsupported_version(self) -> None:
        with pytest.raises(UnsupportedVersion):
            ScrobblerLogParser(["#AUDIOSCROBBLER/0.9", "#TZ/UTC", "#CLIENT/x"]).parse()

    def test_accessors_require_done(self, utc_header_lines) -> None:
        parser = ScrobblerLogParser(utc_header_lines + ["A\tB\tC\t1\t10\tL\t1000000000"])
        with pytest.raises(ParserStateError):
            parser.stats
        with pytest.raises(ParserStateError):
            parser.header
        parser.read_header()
        assert parser.header.client == "TestPlayer"
        with pytest.raises(ParserStateError):
            parser.client

    def test_parse_only_once(self, utc_header_lines) -> None:
        parser = ScrobblerLogParser(utc_header_lines + ["A\tB\tC\t1\t10\tL\t1000000000"])
        parser.parse()
        with pytest.raises(ParserStateError):
            parser.parse()
        with pytest.raises(ParserStateError):
            parser.set_timezone("UTC")

    def test_parse_after_failure_raises_state_error(self) -> None:
        parser = ScrobblerLogParser(["#AUDIOSCROBBLER/1.0", "#TZ/UTC"])
        with pytest.raises(MissingHeaderLine):
            parser.parse()
        with pytest.raises(ParserStateError, match="failed"):
            parser.parse()

    def test_errors_share_base(self, utc_header_lines) -> None:
        with pytest.raises(ScrobblerLogError):
            ScrobblerLogParser(utc_header_lines).parse()


class TestFileHelpers:
    def test_parse_file(self, tmp_log_file, utc_header_lines, v10_body_lines) -> None:
        path = tmp_log_file(utc_header_lines + v10_body_lines)
        result = parse_file(path)
        assert len(result.records) == 3
        assert result.client == "TestPlayer"
        assert result.format_version == "1.0"
        assert result.stats.total_tracks == 3

    def test_parse_file_crlf(self, tmp_path: Path, utc_header_lines) -> None:
        path = tmp_path / "crlf.log"
        body = "A\tB\tC\t1\t10\tL\t1000000000"
        path.write_bytes(("\r\n".join(utc_header_lines + [body]) + "\r\n").encode())
        result = parse_file(path)
        assert result.records[0].listen_time == EPOCH_1E9

    def test_parse_file_with_timezone(self, tmp_log_file, unknown_tz_header_lines, v11_body_lines) -> None:
        path = tmp_log_file(unknown_tz_header_lines + v11_body_lines)
        result = parse_file(path, timezone="Europe/London")
        # 01:46:40 local BST (UTC+1)
        assert result.records[0].listen_time == datetime(2001, 9, 9, 0, 46, 40, tzinfo=timezone.utc)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ResourceUnavailable) as exc_info:
            with open_log(tmp_path / "nope.log"):
                pass
        assert isinstance(exc_info.value, OSError)

    def test_file_closed_after_error(self, tmp_log_file, utc_header_lines) -> None:
        path = tmp_log_file(utc_header_lines)
        with pytest.raises(EmptyLog):
            with open_log(path) as lines:
                handle = lines
                ScrobblerLogParser(lines).parse()
        with pytest.raises(ValueError):
            next(handle)


class TestBodyLineHandling:
    def test_interior_blank_line_fails(self, utc_header_lines) -> None:
        lines = utc_header_lines + [
            "A\tB\tC\t1\t10\tL\t1000000000\n",
            "\n",
            "A\tB\tD\t1\t10\tL\t1000000100\n",
        ]
        parser = ScrobblerLogParser(lines)
        with pytest.raises(FieldCountMismatch) as exc_info:
            parser.parse()
        assert exc_info.value.line_no == 5
        assert exc_info.value.actual == 1
        assert parser.state is ParserState.FAILED

    def test_empty_string_between_records_fails(self, utc_header_lines) -> None:
        lines = utc_header_lines + ["A\tB\tC\t1\t10\tL\t1000000000", "", "A\tB\tD\t1\t10\tL\t1000000100"]
        with pytest.raises(FieldCountMismatch):
            ScrobblerLogParser(lines).parse()

    def test_trailing_blank_lines_ignored(self, utc_header_lines) -> None:
        lines = utc_header_lines + ["A\tB\tC\t1\t10\tL\t1000000000\n", "\n", ""]
        records = ScrobblerLogParser(lines).parse()
        assert len(records) == 1


class TestFileEncoding:
    def test_byte_order_mark(self, tmp_path: Path, utc_header_lines) -> None:
        path = tmp_path / "bom.log"
        text = "\n".join(utc_header_lines + ["A\tB\tC\t1\t10\tL\t1000000000"]) + "\n"
        path.write_bytes(b"\xef\xbb\xbf" + text.encode("utf-8"))
        result = parse_file(path)
        assert result.format_version == "1.0"
        assert len(result.records) == 1

    def test_invalid_utf8_is_not_replaced(self, tmp_path: Path, utc_header_lines) -> None:
        path = tmp_path / "latin1.log"
        header = ("\n".join(utc_header_lines) + "\n").encode("utf-8")
        path.write_bytes(header + "Beyonc\xe9\tB\tC\t1\t10\tL\t1000000000\n".encode("latin-1"))
        with pytest.raises(ResourceUnavailable) as exc_info:
            parse_file(path)
        assert "not valid" in str(exc_info.value)

    def test_explicit_encoding(self, tmp_path: Path, utc_header_lines) -> None:
        path = tmp_path / "latin1.log"
        text = "\n".join(utc_header_lines + ["Beyonc\xe9\tB\tC\t1\t10\tL\t1000000000"]) + "\n"
        path.write_bytes(text.encode("latin-1"))
        assert parse_file(path, encoding="latin-1").records[0].artist == "Beyonc\xe9"
