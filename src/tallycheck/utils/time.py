from __future__ import annotations

from datetime import date, datetime, time, timedelta

from tallycheck.errors import ValidationError

MAX_WINDOW_SPAN = timedelta(hours=24)


class InvalidTimeRange(ValidationError):
    pass


def parse_time_of_day(value: time | str | None) -> time | None:
    if value is None or isinstance(value, time):
        return value

    candidate = value.strip()
    if not candidate:
        return None

    for fmt in ("%H:%M", "%H:%M:%S", "%H:%M:%S.%f"):
        try:
            return datetime.strptime(candidate, fmt).time()
        except ValueError:
            continue

    raise ValidationError(f"Unsupported time of day: {value!r}")


def coerce_date(value: date | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    candidate = value.strip()
    try:
        return date.fromisoformat(candidate[:10])
    except ValueError as exc:
        raise ValidationError(f"Unsupported date value: {value!r}") from exc


def coerce_datetime(value: datetime | str) -> datetime:
    if isinstance(value, datetime):
        return value

    if isinstance(value, str):
        candidate = value.strip().replace(" ", "T", 1)
        try:
            return datetime.fromisoformat(candidate)
        except ValueError:
            for fmt in ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M:%S.%f", "%Y-%m-%d %H:%M"):
                try:
                    return datetime.strptime(value.strip(), fmt)
                except ValueError:
                    continue

    raise ValidationError(f"Unsupported datetime value: {value!r}")


def optional_datetime(value: datetime | str | None) -> datetime | None:
    if value is None or value == "":
        return None
    return coerce_datetime(value)


def combine(day: date, moment: time | str | None, *, fallback: time | None = None) -> datetime | None:
    """Anchor a time of day on a calendar date.

    Returns ``None`` when neither ``moment`` nor ``fallback`` is available.
    """

    parsed = parse_time_of_day(moment)
    if parsed is None:
        parsed = fallback
    if parsed is None:
        return None
    return datetime.combine(day, parsed)


def anchor_window_bound(day: date, value: datetime | time | str | None) -> datetime | None:
    """Window bounds may arrive as full timestamps or as clock times on the session day."""

    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, time):
        return datetime.combine(day, value)

    candidate = value.strip()
    if len(candidate) <= len("HH:MM:SS.ffffff") and "-" not in candidate:
        return combine(day, candidate)
    return coerce_datetime(candidate)


def validate_window(start: datetime | None, end: datetime | None) -> None:
    if start is None or end is None:
        return

    if end < start:
        raise InvalidTimeRange("Attendance window end must not be earlier than its start.")

    if end - start > MAX_WINDOW_SPAN:
        raise InvalidTimeRange("Attendance window may not span more than 24 hours.")


def format_countdown(total_seconds: int) -> str:
    seconds = max(0, int(total_seconds))
    minutes, remainder = divmod(seconds, 60)
    return f"{minutes}:{remainder:02d}"
