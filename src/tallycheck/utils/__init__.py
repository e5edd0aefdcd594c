from .clock import Clock, FixedClock, SystemClock
from .time import (
    InvalidTimeRange,
    anchor_window_bound,
    coerce_date,
    coerce_datetime,
    combine,
    format_countdown,
    optional_datetime,
    parse_time_of_day,
    validate_window,
)

__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
    "InvalidTimeRange",
    "anchor_window_bound",
    "coerce_date",
    "coerce_datetime",
    "combine",
    "format_countdown",
    "optional_datetime",
    "parse_time_of_day",
    "validate_window",
]
