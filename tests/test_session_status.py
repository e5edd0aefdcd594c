from datetime import date, datetime, time, timedelta

from tallycheck.models import ClassSession, SessionStatus
from tallycheck.services import classify, compare_sessions, sort_by_priority


def _session(session_id="S1", day=date(2025, 10, 2), start=time(9, 0), end=time(10, 30)):
    return ClassSession(id=session_id, course_id="C1", session_date=day, start_time=start, end_time=end)


def test_classify_boundaries():
    session = _session()
    assert classify(session, datetime(2025, 10, 2, 8, 59, 59)) is SessionStatus.UPCOMING
    assert classify(session, datetime(2025, 10, 2, 9, 0)) is SessionStatus.ONGOING
    assert classify(session, datetime(2025, 10, 2, 9, 5)) is SessionStatus.ONGOING
    assert classify(session, datetime(2025, 10, 2, 10, 30)) is SessionStatus.ONGOING
    assert classify(session, datetime(2025, 10, 2, 10, 30, 1)) is SessionStatus.COMPLETED


def test_classify_uses_calendar_day():
    session = _session()
    assert classify(session, datetime(2025, 10, 1, 12, 0)) is SessionStatus.UPCOMING
    assert classify(session, datetime(2025, 10, 3, 8, 0)) is SessionStatus.COMPLETED


def test_classification_has_no_gap_or_overlap():
    session = _session()
    instant = datetime(2025, 10, 2, 8, 0)
    seen = []
    while instant <= datetime(2025, 10, 2, 11, 30):
        seen.append(classify(session, instant))
        instant += timedelta(minutes=1)

    # Statuses only ever move forward: upcoming* ongoing* completed*.
    order = [SessionStatus.UPCOMING, SessionStatus.ONGOING, SessionStatus.COMPLETED]
    ranks = [order.index(status) for status in seen]
    assert ranks == sorted(ranks)
    assert set(seen) == set(order)


def test_missing_times_default_without_raising():
    no_times = _session(start=None, end=None)
    assert classify(no_times, datetime(2025, 10, 2, 12, 0)) is SessionStatus.UPCOMING
    assert classify(no_times, datetime(2025, 10, 1, 12, 0)) is SessionStatus.UPCOMING
    assert classify(no_times, datetime(2025, 10, 3, 0, 0)) is SessionStatus.COMPLETED

    no_end = _session(end=None)
    assert classify(no_end, datetime(2025, 10, 2, 23, 0)) is SessionStatus.ONGOING

    no_start = _session(start=None)
    assert classify(no_start, datetime(2025, 10, 2, 0, 1)) is SessionStatus.ONGOING


def test_sort_by_priority_orders_ongoing_upcoming_completed():
    now = datetime(2025, 10, 2, 9, 5)
    completed = _session("done", day=date(2025, 10, 1))
    ongoing = _session("now")
    later_today = _session("later", start=time(13, 0), end=time(14, 0))
    tomorrow = _session("tomorrow", day=date(2025, 10, 3), start=time(8, 0), end=time(9, 0))
    early_completed = _session("early", day=date(2025, 9, 30))

    ordered = sort_by_priority([tomorrow, completed, later_today, early_completed, ongoing], now)

    assert [session.id for session in ordered] == ["now", "later", "tomorrow", "early", "done"]


def test_compare_sessions_is_a_total_order():
    now = datetime(2025, 10, 2, 9, 5)
    first = _session("a", start=time(13, 0), end=time(14, 0))
    second = _session("b", start=time(13, 0), end=time(14, 0))

    assert compare_sessions(first, second, now) == -1
    assert compare_sessions(second, first, now) == 1
    assert compare_sessions(first, first, now) == 0
