from datetime import date, datetime, time

import pytest

from tallycheck.errors import ValidationError
from tallycheck.utils import anchor_window_bound, format_countdown, parse_time_of_day, validate_window


def test_parse_time_of_day_accepts_form_values():
    assert parse_time_of_day("09:00") == time(9, 0)
    assert parse_time_of_day("10:30:15") == time(10, 30, 15)
    assert parse_time_of_day("") is None
    with pytest.raises(ValidationError):
        parse_time_of_day("9 o'clock")


def test_window_bound_anchors_clock_time_on_session_day():
    day = date(2025, 10, 2)
    assert anchor_window_bound(day, "08:45") == datetime(2025, 10, 2, 8, 45)
    assert anchor_window_bound(day, "2025-10-02 09:15:00") == datetime(2025, 10, 2, 9, 15)
    assert anchor_window_bound(day, None) is None


def test_validate_window_rejects_inverted_and_oversized_windows():
    validate_window(datetime(2025, 10, 2, 9), datetime(2025, 10, 2, 9))
    with pytest.raises(ValidationError):
        validate_window(datetime(2025, 10, 2, 10), datetime(2025, 10, 2, 9))
    with pytest.raises(ValidationError):
        validate_window(datetime(2025, 10, 2, 9), datetime(2025, 10, 3, 9, 1))


def test_format_countdown():
    assert format_countdown(905) == "15:05"
    assert format_countdown(59) == "0:59"
    assert format_countdown(-3) == "0:00"
