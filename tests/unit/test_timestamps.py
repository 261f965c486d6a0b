"""
Unit tests for XMLTV timestamp parsing.
"""
from datetime import datetime, timezone

import pytest

from app.exceptions import TimestampFormatError
from app.utils.timestamps import format_timestamp, parse_xmltv_timestamp


def test_parses_digit_groups():
    """Each digit group maps to its datetime component."""
    dt = parse_xmltv_timestamp("20240229235958")
    assert (dt.year, dt.month, dt.day) == (2024, 2, 29)
    assert (dt.hour, dt.minute, dt.second) == (23, 59, 58)


def test_result_is_utc():
    """Values without zone are anchored at UTC."""
    dt = parse_xmltv_timestamp("20240101120000")
    assert dt == datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("value", [
    "2024-01-01",
    "202401011200",
    "",
    "20240101120000 +0000",
    "2024010112000a",
    " 20240101120000",
    "202401011200000",
])
def test_rejects_wrong_shape(value):
    """Anything but exactly 14 digits is rejected."""
    with pytest.raises(TimestampFormatError) as exc_info:
        parse_xmltv_timestamp(value, "start")
    assert exc_info.value.value == value
    assert exc_info.value.attribute == "start"


@pytest.mark.parametrize("value", ["20241301120000", "20240230120000", "20240101250000"])
def test_rejects_invalid_calendar_values(value):
    """Fourteen digits that do not form a valid time are rejected."""
    with pytest.raises(TimestampFormatError):
        parse_xmltv_timestamp(value)


def test_error_is_a_value_error():
    """TimestampFormatError can be caught as ValueError."""
    with pytest.raises(ValueError):
        parse_xmltv_timestamp("nope")


def test_format_timestamp():
    assert format_timestamp(datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)) == "2024-01-01 12:00:00"
    assert format_timestamp(None) == "-"
