"""Unit tests for timestamp utilities."""

from datetime import datetime, timedelta, timezone

from tracker.utils.timestamps import (
    ensure_utc,
    format_timestamp,
    parse_timestamp,
    start_of_day,
    utc_now,
)


class TestUtcNow:
    """Tests for utc_now function."""

    def test_utc_now_returns_utc_datetime(self):
        now = utc_now()

        assert now.tzinfo == timezone.utc
        assert isinstance(now, datetime)

    def test_utc_now_is_recent(self):
        before = datetime.now(timezone.utc)
        now = utc_now()
        after = datetime.now(timezone.utc)

        assert before <= now <= after


class TestEnsureUtc:
    """Tests for ensure_utc function."""

    def test_ensure_utc_with_none(self):
        assert ensure_utc(None) is None

    def test_ensure_utc_with_naive_datetime(self):
        """Naive datetimes are treated as UTC."""
        result = ensure_utc(datetime(2025, 11, 4, 12, 0, 0))

        assert result.tzinfo == timezone.utc
        assert result.hour == 12

    def test_ensure_utc_with_other_timezone(self):
        est = timezone(timedelta(hours=-5))

        result = ensure_utc(datetime(2025, 11, 4, 12, 0, 0, tzinfo=est))

        assert result.tzinfo == timezone.utc
        # 12:00 EST should be 17:00 UTC
        assert result.hour == 17


class TestStartOfDay:
    """Tests for start_of_day function."""

    def test_truncates_to_midnight(self):
        result = start_of_day(datetime(2025, 6, 10, 15, 30, 12, 999, tzinfo=timezone.utc))

        assert result == datetime(2025, 6, 10, tzinfo=timezone.utc)

    def test_uses_utc_day(self):
        """23:00 at UTC-5 is already the next day in UTC."""
        est = timezone(timedelta(hours=-5))

        result = start_of_day(datetime(2025, 6, 10, 23, 0, tzinfo=est))

        assert result == datetime(2025, 6, 11, tzinfo=timezone.utc)


class TestParseTimestamp:
    """Tests for parse_timestamp function."""

    def test_with_z_suffix(self):
        result = parse_timestamp("2025-11-04T12:00:00Z")

        assert result == datetime(2025, 11, 4, 12, tzinfo=timezone.utc)

    def test_with_microseconds_and_offset(self):
        result = parse_timestamp("2025-11-04T14:00:00.250000+02:00")

        assert result == datetime(2025, 11, 4, 12, 0, 0, 250000, tzinfo=timezone.utc)

    def test_without_timezone(self):
        result = parse_timestamp("2025-11-04T12:00:00")

        assert result.tzinfo == timezone.utc

    def test_empty_and_none(self):
        assert parse_timestamp("") is None
        assert parse_timestamp("   ") is None
        assert parse_timestamp(None) is None

    def test_invalid_format(self):
        assert parse_timestamp("not a date") is None
        assert parse_timestamp("2025/11/04") is None


class TestFormatTimestamp:
    """Tests for format_timestamp function."""

    def test_format_timestamp_basic(self):
        dt = datetime(2025, 11, 4, 12, 0, 0, tzinfo=timezone.utc)

        assert format_timestamp(dt) == "2025-11-04T12:00:00Z"

    def test_format_timestamp_with_microseconds(self):
        dt = datetime(2025, 11, 4, 12, 0, 0, 123456, tzinfo=timezone.utc)

        assert format_timestamp(dt) == "2025-11-04T12:00:00Z"
        assert format_timestamp(dt, include_microseconds=True) == "2025-11-04T12:00:00.123456Z"

    def test_format_timestamp_converts_to_utc(self):
        est = timezone(timedelta(hours=-5))
        dt = datetime(2025, 11, 4, 12, 0, 0, tzinfo=est)

        assert format_timestamp(dt) == "2025-11-04T17:00:00Z"

    def test_format_timestamp_with_naive_datetime(self):
        assert format_timestamp(datetime(2025, 11, 4, 12, 0, 0)) == "2025-11-04T12:00:00Z"

    def test_format_timestamp_with_none(self):
        assert format_timestamp(None) == ""
