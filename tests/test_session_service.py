from __future__ import annotations

from datetime import date, datetime, time

import pytest

from tallycheck.errors import NotFoundError, PersistenceError, ValidationError
from tallycheck.models import SessionStatus
from tallycheck.services import SessionService, classify


def test_create_session_returns_stored_record(engine):
    session = engine.sessions.create_session(
        "C1",
        "2025-10-02",
        "09:00",
        "10:30",
        location="A101",
        attendance_window_start="08:45",
        attendance_window_end="09:15",
        course_name="Algorithms",
        created_by="lecturer-1",
    )

    assert session.id
    assert session.session_date == date(2025, 10, 2)
    assert session.start_time == time(9, 0)
    assert session.attendance_window_start == datetime(2025, 10, 2, 8, 45)
    assert session.attendance_window_end == datetime(2025, 10, 2, 9, 15)
    assert session.beacon_id is None
    assert engine.sessions.get_session(session.id) == session
    assert classify(session, engine.clock.now()) is SessionStatus.ONGOING


def test_create_session_validates_times(engine):
    with pytest.raises(ValidationError):
        engine.sessions.create_session("C1", "2025-10-02", "10:30", "09:00")
    with pytest.raises(ValidationError):
        engine.sessions.create_session(
            "C1",
            "2025-10-02",
            "09:00",
            "10:30",
            attendance_window_start="09:15",
            attendance_window_end="08:45",
        )
    with pytest.raises(ValidationError):
        engine.sessions.create_session("", "2025-10-02", "09:00", "10:30")
    with pytest.raises(NotFoundError):
        engine.sessions.create_session("C1", "2025-10-02", "09:00", "10:30", beacon_id="ghost")


def test_beacon_is_frozen_at_creation(engine):
    first = engine.beacons.register_beacon("Hall", "AA:BB:CC:DD:EE:01")
    second = engine.beacons.register_beacon("Annex", "AA:BB:CC:DD:EE:02")
    default = engine.beacons.assign(first.id, "C1")

    session = engine.sessions.create_session("C1", "2025-10-02", "09:00", "10:30")
    assert session.beacon_id == first.id

    engine.beacons.unassign(default.id)
    engine.beacons.assign(second.id, "C1")

    assert engine.sessions.get_session(session.id).beacon_id == first.id
    later = engine.sessions.create_session("C1", "2025-10-03", "09:00", "10:30")
    assert later.beacon_id == second.id


def test_explicit_beacon_wins_over_default(engine):
    default = engine.beacons.register_beacon("Hall", "AA:BB:CC:DD:EE:01")
    chosen = engine.beacons.register_beacon("Lab", "AA:BB:CC:DD:EE:02")
    engine.beacons.assign(default.id, "C1")

    session = engine.sessions.create_session("C1", "2025-10-02", "09:00", "10:30", beacon_id=chosen.id)

    assert session.beacon_id == chosen.id


def test_update_session_moves_window_with_date(engine):
    session = engine.sessions.create_session(
        "C1",
        "2025-10-02",
        "09:00",
        "10:30",
        attendance_window_start="08:45",
        attendance_window_end="09:15",
    )

    moved = engine.sessions.update_session(session.id, {"session_date": "2025-10-09", "location": "B201"})

    assert moved.session_date == date(2025, 10, 9)
    assert moved.location == "B201"
    assert moved.attendance_window_start == datetime(2025, 10, 9, 8, 45)
    assert moved.attendance_window_end == datetime(2025, 10, 9, 9, 15)

    narrowed = engine.sessions.update_session(session.id, {"attendance_window_end": "09:00"})
    assert narrowed.attendance_window_end == datetime(2025, 10, 9, 9, 0)

    with pytest.raises(ValidationError):
        engine.sessions.update_session(session.id, {"end_time": "08:00"})
    with pytest.raises(ValidationError):
        engine.sessions.update_session(session.id, {"id": "hijack"})
    with pytest.raises(NotFoundError):
        engine.sessions.update_session("missing", {"location": "X"})


def test_delete_session_cascades_records(engine):
    session = engine.sessions.create_session("C1", "2025-10-02", "09:00", "10:30")
    engine.check_ins.submit_check_in("ST1", session.id, "MANUAL")
    engine.check_ins.submit_check_in("ST2", session.id, "QR")

    engine.sessions.delete_session(session.id)

    with pytest.raises(NotFoundError):
        engine.sessions.get_session(session.id)
    assert engine.attendance.records_for_session(session.id) == []
    with pytest.raises(NotFoundError):
        engine.sessions.delete_session(session.id)


def test_list_sessions_by_priority(engine):
    done = engine.sessions.create_session("C1", "2025-10-01", "09:00", "10:30")
    upcoming = engine.sessions.create_session("C1", "2025-10-02", "13:00", "14:00")
    ongoing = engine.sessions.create_session("C2", "2025-10-02", "09:00", "10:30")

    assert [s.id for s in engine.sessions.list_sessions()] == [ongoing.id, upcoming.id, done.id]
    assert [s.id for s in engine.sessions.list_sessions(["C1"])] == [upcoming.id, done.id]
    assert [s.id for s in engine.sessions.sessions_for_date("2025-10-02")] == [ongoing.id, upcoming.id]


def test_half_specified_window_is_checked_against_schedule(engine):
    with pytest.raises(ValidationError):
        engine.sessions.create_session("C1", "2025-10-02", "09:00", "10:30", attendance_window_start="11:00")
    with pytest.raises(ValidationError):
        engine.sessions.create_session("C1", "2025-10-02", "09:00", "10:30", attendance_window_end="08:30")

    open_ended = engine.sessions.create_session("C1", "2025-10-02", "09:00", None, attendance_window_start="11:00")
    assert open_ended.attendance_window_start == datetime(2025, 10, 2, 11, 0)

    session = engine.sessions.create_session("C1", "2025-10-02", "09:00", "10:30", attendance_window_start="08:45")
    with pytest.raises(ValidationError):
        engine.sessions.update_session(session.id, {"attendance_window_start": "10:45"})
    with pytest.raises(ValidationError):
        engine.sessions.update_session(session.id, {"start_time": "07:00", "end_time": "08:00"})

    assert engine.sessions.get_session(session.id) == session


class _FailingDeleteStore:
    """Delegates to a real store but fails the n-th delete."""

    def __init__(self, inner, fail_on):
        self._inner = inner
        self._fail_on = fail_on
        self.deletes = 0

    def __getattr__(self, name):
        return getattr(self._inner, name)

    def delete(self, entity, record_id):
        self.deletes += 1
        if self.deletes == self._fail_on:
            raise PersistenceError("disk I/O error")
        self._inner.delete(entity, record_id)


def test_failed_delete_rolls_back_the_cascade(engine, store, clock):
    session = engine.sessions.create_session("C1", "2025-10-02", "09:00", "10:30")
    engine.check_ins.submit_check_in("ST1", session.id, "MANUAL")
    engine.check_ins.submit_check_in("ST2", session.id, "QR")

    failing = SessionService(_FailingDeleteStore(store, fail_on=2), engine.beacons, clock=clock)
    with pytest.raises(PersistenceError):
        failing.delete_session(session.id)

    assert engine.sessions.get_session(session.id) == session
    assert len(engine.attendance.records_for_session(session.id)) == 2
