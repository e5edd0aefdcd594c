from __future__ import annotations

from datetime import datetime, time
from functools import cmp_to_key
from typing import Iterable

from tallycheck.models import STATUS_PRIORITY, ClassSession, SessionStatus

DAY_START = time.min
DAY_END = time.max


def classify(session: ClassSession, now: datetime) -> SessionStatus:
    """Derive the temporal status of a session at ``now``.

    A missing start time is read as the start of the session day and a missing
    end time as its last instant, so a session without any times is still
    ``completed`` once its day has passed. On the day itself, with no times at
    all, nothing orders ``now`` against the session and it stays ``upcoming``.
    """

    if session.start_time is None and session.end_time is None:
        if now.date() > session.session_date:
            return SessionStatus.COMPLETED
        return SessionStatus.UPCOMING

    start = datetime.combine(session.session_date, session.start_time or DAY_START)
    end = datetime.combine(session.session_date, session.end_time or DAY_END)

    if now < start:
        return SessionStatus.UPCOMING
    if now <= end:
        return SessionStatus.ONGOING
    return SessionStatus.COMPLETED


def priority_key(session: ClassSession, now: datetime) -> tuple:
    status = classify(session, now)
    return (
        STATUS_PRIORITY[status],
        session.session_date,
        session.start_time or DAY_START,
        session.id or "",
    )


def compare_sessions(left: ClassSession, right: ClassSession, now: datetime) -> int:
    left_key = priority_key(left, now)
    right_key = priority_key(right, now)
    return (left_key > right_key) - (left_key < right_key)


def sort_by_priority(sessions: Iterable[ClassSession], now: datetime) -> list[ClassSession]:
    """Ongoing first, then upcoming, then completed; ties by date and start time."""

    return sorted(sessions, key=cmp_to_key(lambda a, b: compare_sessions(a, b, now)))
