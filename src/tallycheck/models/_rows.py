from __future__ import annotations

from datetime import date, datetime, time

from tallycheck.utils.time import coerce_date, optional_datetime, parse_time_of_day


def dump_datetime(value: datetime | None) -> str | None:
    return value.isoformat(sep=" ") if value is not None else None


def dump_time(value: time | None) -> str | None:
    return value.isoformat() if value is not None else None


def dump_date(value: date | None) -> str | None:
    return value.isoformat() if value is not None else None


def load_datetime(value) -> datetime | None:
    return optional_datetime(value)


def load_time(value) -> time | None:
    return parse_time_of_day(value)


def load_date(value) -> date | None:
    if value is None or value == "":
        return None
    return coerce_date(value)
