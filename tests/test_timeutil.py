from datetime import date

import pytest

from studio_booking.errors import ValidationError
from studio_booking.timeutil import (
    add_minutes,
    day_of_week,
    format_minutes,
    overlaps,
    parse_date,
    to_minutes,
)


def test_to_minutes_parses_clock_times():
    assert to_minutes("00:00") == 0
    assert to_minutes("09:30") == 570
    assert to_minutes("9:05") == 545
    assert to_minutes("13:45:00") == 825
    assert to_minutes("24:00") == 1440


@pytest.mark.parametrize("value", ["", "noon", "25:00", "10:60", "24:30", "10"])
def test_to_minutes_rejects_malformed_times(value):
    with pytest.raises(ValidationError):
        to_minutes(value)


def test_add_minutes_wraps_hours():
    assert add_minutes("09:45", 30) == "10:15"
    assert add_minutes("10:00", 90) == "11:30"
    assert add_minutes("23:00", 60) == "24:00"


def test_add_minutes_rejects_crossing_midnight():
    with pytest.raises(ValidationError, match="midnight"):
        add_minutes("23:30", 60)


def test_format_minutes_pads():
    assert format_minutes(65) == "01:05"


def test_day_of_week_counts_from_sunday():
    assert day_of_week(date(2024, 1, 7)) == 0  # Sunday
    assert day_of_week(date(2024, 1, 1)) == 1  # Monday
    assert day_of_week(date(2024, 1, 6)) == 6  # Saturday


def test_parse_date_rejects_garbage():
    assert parse_date("2024-02-29") == date(2024, 2, 29)
    with pytest.raises(ValidationError):
        parse_date("2023-02-29")
    with pytest.raises(ValidationError):
        parse_date("tomorrow")


@pytest.mark.parametrize("value", ["20240101", "2024-W01-1", "2024-001", "2024-1-1"])
def test_parse_date_requires_dashed_calendar_form(value):
    with pytest.raises(ValidationError):
        parse_date(value)


def test_overlaps_is_half_open():
    assert overlaps(600, 660, 630, 690)
    assert overlaps(600, 720, 630, 660)
    assert not overlaps(600, 660, 660, 720)
    assert not overlaps(660, 720, 600, 660)
