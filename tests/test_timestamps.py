"""
Tests for pulling event times out of comment text.
"""
from datetime import date, datetime, timezone

from conftest import utc

from captainslog.services.timestamps import extract_timestamp, parse_instant, strip_timestamps

FALLBACK = utc(2025, 6, 1)


class TestExtractTimestamp:

    def test_labeled_lowercase(self):
        assert extract_timestamp("Arrived timestamp: 2025-07-07 10:30", FALLBACK) == utc(2025, 7, 7, 10, 30)

    def test_labeled_capitalised(self):
        assert extract_timestamp("Arrived Timestamp: 2025-07-07 10:30", FALLBACK) == utc(2025, 7, 7, 10, 30)

    def test_bare(self):
        assert extract_timestamp("Arrived 2025-07-07 10:30", FALLBACK) == utc(2025, 7, 7, 10, 30)

    def test_missing_returns_fallback_unchanged(self):
        assert extract_timestamp("Arrived", FALLBACK) is FALLBACK

    def test_t_separator_and_seconds(self):
        assert extract_timestamp("Departed timestamp: 2025-07-07T10:30:45", FALLBACK) == utc(2025, 7, 7, 10, 30, 45)

    def test_timezone_suffix(self):
        assert extract_timestamp("Arrived timestamp: 2025-07-07 12:30+02:00", FALLBACK) == utc(2025, 7, 7, 10, 30)
        assert extract_timestamp("Arrived timestamp: 2025-07-07 10:30Z", FALLBACK) == utc(2025, 7, 7, 10, 30)
        assert extract_timestamp("Arrived timestamp: 2025-07-07 05:30-0500", FALLBACK) == utc(2025, 7, 7, 10, 30)

    def test_labeled_wins_over_earlier_bare_date(self):
        text = "Departed after the 2025-07-01 09:00 forecast, timestamp: 2025-07-03 06:15"
        assert extract_timestamp(text, FALLBACK) == utc(2025, 7, 3, 6, 15)

    def test_invalid_calendar_date_falls_back(self):
        assert extract_timestamp("Arrived timestamp: 2025-02-30 10:30", FALLBACK) is FALLBACK

    def test_non_string_falls_back(self):
        assert extract_timestamp(None, FALLBACK) is FALLBACK


class TestParseInstant:

    def test_trello_format(self):
        assert parse_instant("2025-07-07T10:30:00.000Z") == utc(2025, 7, 7, 10, 30)

    def test_naive_is_utc(self):
        assert parse_instant("2025-07-07T10:30") == utc(2025, 7, 7, 10, 30)

    def test_date_only(self):
        assert parse_instant("2025-07-07") == utc(2025, 7, 7)

    def test_datetime_passthrough(self):
        assert parse_instant(datetime(2025, 7, 7, 10, 30)) == utc(2025, 7, 7, 10, 30)
        assert parse_instant(utc(2025, 7, 7)).tzinfo == timezone.utc

    def test_offset_converted_to_utc(self):
        assert parse_instant("2025-07-03T01:00:00+02:00") == utc(2025, 7, 2, 23, 0)
        assert parse_instant("2025-07-03T01:00:00+02:00").tzinfo == timezone.utc

    def test_keep_offset(self):
        parsed = parse_instant("2025-07-03T01:00:00+02:00", keep_offset=True)
        assert parsed.date() == date(2025, 7, 3)
        assert parsed == utc(2025, 7, 2, 23, 0)
        assert parse_instant("2025-07-03T01:00:00", keep_offset=True).tzinfo == timezone.utc

    def test_garbage(self):
        assert parse_instant("soon") is None
        assert parse_instant(None) is None
        assert parse_instant("") is None


class TestStripTimestamps:

    def test_removes_labeled_fragment(self):
        assert strip_timestamps("anchor windlass timestamp: 2025-07-07 10:30") == "anchor windlass"

    def test_removes_bare_fragment(self):
        assert strip_timestamps("45L 2025-07-07 10:30 at the fuel dock") == "45L at the fuel dock"
