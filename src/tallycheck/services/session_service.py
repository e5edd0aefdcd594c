from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import date, datetime, time
from typing import Any, Iterable, Mapping

from tallycheck.data import ATTENDANCE_RECORDS, BEACON_ASSIGNMENTS, BEACONS, SESSIONS, DataStore
from tallycheck.errors import NotFoundError, ValidationError
from tallycheck.models import ClassSession
from tallycheck.services.attendance_window import window_bounds
from tallycheck.services.beacons import BeaconService
from tallycheck.services.session_status import sort_by_priority
from tallycheck.utils import Clock, SystemClock, anchor_window_bound, coerce_date, parse_time_of_day, validate_window
from tallycheck.utils.time import InvalidTimeRange

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset(
    {
        "course_id",
        "course_name",
        "session_date",
        "start_time",
        "end_time",
        "location",
        "beacon_id",
        "attendance_window_start",
        "attendance_window_end",
    }
)


class SessionService:
    def __init__(
        self,
        store: DataStore,
        beacons: BeaconService,
        *,
        clock: Clock | None = None,
    ) -> None:
        self._store = store
        self._beacons = beacons
        self._clock = clock or SystemClock()

    def create_session(
        self,
        course_id: str,
        session_date: date | str,
        start_time: time | str | None,
        end_time: time | str | None,
        *,
        location: str | None = None,
        attendance_window_start: datetime | time | str | None = None,
        attendance_window_end: datetime | time | str | None = None,
        beacon_id: str | None = None,
        course_name: str | None = None,
        created_by: str | None = None,
    ) -> ClassSession:
        if not course_id:
            raise ValidationError("A session needs a course.")

        day = coerce_date(session_date)
        session = ClassSession(
            id=uuid.uuid4().hex,
            course_id=course_id,
            course_name=course_name,
            session_date=day,
            start_time=parse_time_of_day(start_time),
            end_time=parse_time_of_day(end_time),
            location=(location or None),
            attendance_window_start=anchor_window_bound(day, attendance_window_start),
            attendance_window_end=anchor_window_bound(day, attendance_window_end),
            created_by=created_by,
            created_at=self._clock.now(),
        )
        self._validate(session)

        if beacon_id:
            self._require_beacon(beacon_id)
        # Frozen at creation: later changes to course defaults leave this session alone.
        session.beacon_id = self._beacons.resolve_beacon(course_id, session.id, beacon_id)

        row = self._store.insert(SESSIONS, session.to_row())
        logger.info(
            "Created session %s for course %s on %s (beacon=%s)",
            session.id,
            course_id,
            day,
            session.beacon_id,
        )
        return ClassSession.from_row(row)

    def get_session(self, session_id: str) -> ClassSession:
        row = self._store.get(SESSIONS, session_id)
        if row is None:
            raise NotFoundError(f"Session {session_id!r} does not exist.")
        return ClassSession.from_row(row)

    def update_session(self, session_id: str, patch: Mapping[str, Any]) -> ClassSession:
        unknown = set(patch) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot edit session fields: {', '.join(sorted(unknown))}")

        current = self.get_session(session_id)
        day = coerce_date(patch["session_date"]) if patch.get("session_date") else current.session_date

        changes: dict[str, Any] = {"session_date": day}
        if "course_id" in patch and patch["course_id"]:
            changes["course_id"] = patch["course_id"]
        if "course_name" in patch:
            changes["course_name"] = patch["course_name"]
        if "start_time" in patch:
            changes["start_time"] = parse_time_of_day(patch["start_time"])
        if "end_time" in patch:
            changes["end_time"] = parse_time_of_day(patch["end_time"])
        if "location" in patch:
            changes["location"] = patch["location"] or None
        if "beacon_id" in patch:
            if patch["beacon_id"]:
                self._require_beacon(patch["beacon_id"])
            changes["beacon_id"] = patch["beacon_id"] or None

        for bound in ("attendance_window_start", "attendance_window_end"):
            if bound in patch:
                changes[bound] = anchor_window_bound(day, patch[bound])
            elif day != current.session_date and getattr(current, bound) is not None:
                # Moving a session keeps its window at the same clock time on the new day.
                changes[bound] = datetime.combine(day, getattr(current, bound).time())

        updated = replace(current, **changes)
        self._validate(updated)

        row = self._store.update(SESSIONS, session_id, updated.to_row())
        logger.info("Updated session %s", session_id)
        return ClassSession.from_row(row)

    def delete_session(self, session_id: str) -> None:
        """Delete a session together with its attendance records and session-level beacon overrides."""

        with self._store.transaction():
            self.get_session(session_id)

            records = self._store.query(ATTENDANCE_RECORDS, {"session_id": session_id})
            for row in records:
                self._store.delete(ATTENDANCE_RECORDS, row["id"])

            for row in self._store.query(BEACON_ASSIGNMENTS, {"session_id": session_id}):
                self._store.delete(BEACON_ASSIGNMENTS, row["id"])

            self._store.delete(SESSIONS, session_id)
        logger.info("Deleted session %s and %d attendance record(s)", session_id, len(records))

    def list_sessions(
        self,
        course_ids: Iterable[str] | None = None,
        *,
        now: datetime | None = None,
    ) -> list[ClassSession]:
        if course_ids is None:
            rows = self._store.query(SESSIONS)
        else:
            rows = [row for course_id in course_ids for row in self._store.query(SESSIONS, {"course_id": course_id})]
        sessions = [ClassSession.from_row(row) for row in rows]
        return sort_by_priority(sessions, now or self._clock.now())

    def sessions_for_date(self, day: date | str, course_ids: Iterable[str] | None = None) -> list[ClassSession]:
        filters: dict[str, Any] = {"session_date": coerce_date(day).isoformat()}
        if course_ids is None:
            rows = self._store.query(SESSIONS, filters)
        else:
            rows = [
                row
                for course_id in course_ids
                for row in self._store.query(SESSIONS, {**filters, "course_id": course_id})
            ]
        sessions = [ClassSession.from_row(row) for row in rows]
        return sorted(sessions, key=lambda session: (session.start_time or time.min, session.id or ""))

    def sessions_for_beacon(self, beacon_id: str, day: date) -> list[ClassSession]:
        rows = self._store.query(SESSIONS, {"beacon_id": beacon_id, "session_date": day.isoformat()})
        sessions = [ClassSession.from_row(row) for row in rows]
        return sorted(sessions, key=lambda session: (session.start_time or time.min, session.id or ""))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _require_beacon(self, beacon_id: str) -> None:
        if self._store.get(BEACONS, beacon_id) is None:
            raise NotFoundError(f"Beacon {beacon_id!r} does not exist.")

    @staticmethod
    def _validate(session: ClassSession) -> None:
        if session.start_time and session.end_time and session.end_time < session.start_time:
            raise InvalidTimeRange("Session end time must not be earlier than its start time.")
        # A single explicit bound is checked against the scheduled bound it falls back to.
        validate_window(*window_bounds(session))
