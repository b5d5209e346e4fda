"""Tests for date parsing and day normalization."""

import pytest
from datetime import date, datetime, timedelta, timezone

from hisab.utils.date_parser import normalize_date, parse_date, next_day, previous_day


def test_parse_absolute_date():
    """Test parsing absolute dates."""
    result = parse_date("2024-01-15")
    assert result == date(2024, 1, 15)


def test_parse_long_form_date():
    """Test parsing a spelled-out date."""
    assert parse_date("January 15, 2024") == date(2024, 1, 15)


def test_parse_today():
    """Test parsing 'today'."""
    result = parse_date("today")
    assert result == date.today()


def test_parse_yesterday():
    """Test parsing 'yesterday'."""
    result = parse_date("yesterday")
    assert result == date.today() - timedelta(days=1)


def test_parse_tomorrow():
    """Test parsing 'tomorrow'."""
    result = parse_date(" Tomorrow ")
    assert result == date.today() + timedelta(days=1)


def test_parse_invalid_date():
    """Test that garbage raises ValueError."""
    with pytest.raises(ValueError, match="Could not parse date"):
        parse_date("not a date")


class TestNormalizeDate:
    """Tests for normalize_date."""

    def test_date_is_unchanged(self):
        assert normalize_date(date(2024, 3, 10)) == date(2024, 3, 10)

    def test_datetime_is_truncated(self):
        """Any time of day maps to the same calendar day."""
        assert normalize_date(datetime(2024, 3, 10, 0, 0)) == date(2024, 3, 10)
        assert normalize_date(datetime(2024, 3, 10, 23, 59, 59)) == date(2024, 3, 10)

    def test_aware_datetime_uses_local_day(self):
        moment = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)
        assert normalize_date(moment) == moment.astimezone().date()

    def test_epoch_milliseconds(self):
        moment = datetime(2024, 3, 10, 15, 30)
        millis = int(moment.timestamp() * 1000)
        assert normalize_date(millis) == date(2024, 3, 10)

    def test_string(self):
        assert normalize_date("2024-03-10") == date(2024, 3, 10)

    def test_bool_rejected(self):
        with pytest.raises(ValueError):
            normalize_date(True)

    def test_unsupported_type_rejected(self):
        with pytest.raises(ValueError):
            normalize_date(None)


def test_next_and_previous_day_cross_month():
    assert next_day(date(2024, 2, 29)) == date(2024, 3, 1)
    assert previous_day(date(2024, 3, 1)) == date(2024, 2, 29)
