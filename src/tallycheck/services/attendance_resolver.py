from __future__ import annotations

import logging
import uuid
from datetime import date, datetime

from tallycheck.data import ATTENDANCE_RECORDS, DataStore
from tallycheck.errors import NotFoundError, ValidationError
from tallycheck.models import AttendanceRecord, AttendanceStatus, CheckInMethod, ClassSession
from tallycheck.services.attendance_window import is_within_window
from tallycheck.utils import Clock, SystemClock

logger = logging.getLogger(__name__)


def derive_status(session: ClassSession, check_in_instant: datetime) -> AttendanceStatus:
    """``verified`` inside the attendance window, ``pending`` (late or early) outside it."""

    if is_within_window(session, check_in_instant):
        return AttendanceStatus.VERIFIED
    return AttendanceStatus.PENDING


class AttendanceResolver:
    """Keeps exactly one attendance record per (student, session).

    Automatic check-ins derive the status from the attendance window.
    Lecturer decisions (:meth:`mark_status`, :meth:`mark_absent`) stamp
    ``verified_by`` and are never overwritten by later check-ins.
    """

    def __init__(self, store: DataStore, *, clock: Clock | None = None) -> None:
        self._store = store
        self._clock = clock or SystemClock()

    def resolve_check_in(
        self,
        student_id: str,
        session: ClassSession,
        method: CheckInMethod | str,
        check_in_instant: datetime,
        *,
        student_name: str | None = None,
        course_code: str | None = None,
    ) -> AttendanceRecord:
        method = CheckInMethod.parse(method)
        status = derive_status(session, check_in_instant)
        existing = self.find_record(student_id, session.id)

        if existing is None:
            record = AttendanceRecord(
                id=uuid.uuid4().hex,
                student_id=student_id,
                student_name=student_name,
                course_id=session.course_id,
                course_code=course_code,
                session_id=session.id,
                method=method,
                status=status,
                date=session.session_date,
                check_in_time=check_in_instant,
                created_at=self._clock.now(),
            )
            # A concurrent insert for the same pair trips the unique index and raises ConflictError.
            row = self._store.insert(ATTENDANCE_RECORDS, record.to_row())
            logger.info(
                "Recorded %s check-in for student %s in session %s as %s",
                method.value,
                student_id,
                session.id,
                status.value,
            )
            return AttendanceRecord.from_row(row)

        patch: dict[str, object] = {"method": method.value}
        corrects_check_in = existing.check_out_time is None and (
            existing.check_in_time is None or check_in_instant < existing.check_in_time
        )
        if corrects_check_in:
            patch["check_in_time"] = check_in_instant.isoformat(sep=" ")
            if not existing.manually_decided:
                patch["status"] = status.value
        if student_name and not existing.student_name:
            patch["student_name"] = student_name

        row = self._store.update(ATTENDANCE_RECORDS, existing.id, patch)
        logger.info("Updated check-in for student %s in session %s", student_id, session.id)
        return AttendanceRecord.from_row(row)

    def find_record(self, student_id: str, session_id: str | None) -> AttendanceRecord | None:
        rows = self._store.query(ATTENDANCE_RECORDS, {"student_id": student_id, "session_id": session_id})
        return AttendanceRecord.from_row(rows[0]) if rows else None

    def get_record(self, record_id: str) -> AttendanceRecord:
        row = self._store.get(ATTENDANCE_RECORDS, record_id)
        if row is None:
            raise NotFoundError(f"Attendance record {record_id!r} does not exist.")
        return AttendanceRecord.from_row(row)

    def mark_status(
        self,
        record_id: str,
        status: AttendanceStatus | str,
        *,
        verified_by: str,
    ) -> AttendanceRecord:
        if not verified_by:
            raise ValidationError("A manual status change needs the deciding lecturer or admin.")
        status = AttendanceStatus.parse(status)
        self.get_record(record_id)

        row = self._store.update(
            ATTENDANCE_RECORDS,
            record_id,
            {
                "status": status.value,
                "verified_by": verified_by,
                "verified_at": self._clock.now().isoformat(sep=" "),
            },
        )
        logger.info("Record %s manually set to %s by %s", record_id, status.value, verified_by)
        return AttendanceRecord.from_row(row)

    def mark_absent(
        self,
        student_id: str,
        session: ClassSession,
        *,
        verified_by: str,
        student_name: str | None = None,
    ) -> AttendanceRecord:
        existing = self.find_record(student_id, session.id)
        if existing is not None:
            return self.mark_status(existing.id, AttendanceStatus.ABSENT, verified_by=verified_by)

        if not verified_by:
            raise ValidationError("A manual status change needs the deciding lecturer or admin.")
        now = self._clock.now()
        record = AttendanceRecord(
            id=uuid.uuid4().hex,
            student_id=student_id,
            student_name=student_name,
            course_id=session.course_id,
            session_id=session.id,
            method=CheckInMethod.MANUAL,
            status=AttendanceStatus.ABSENT,
            date=session.session_date,
            verified_by=verified_by,
            verified_at=now,
            created_at=now,
        )
        row = self._store.insert(ATTENDANCE_RECORDS, record.to_row())
        logger.info("Student %s marked absent from session %s by %s", student_id, session.id, verified_by)
        return AttendanceRecord.from_row(row)

    def check_out(self, student_id: str, session_id: str, instant: datetime) -> AttendanceRecord:
        record = self.find_record(student_id, session_id)
        if record is None or record.check_in_time is None:
            raise NotFoundError(f"Student {student_id} has not checked in to session {session_id}.")
        if instant < record.check_in_time:
            raise ValidationError("Check-out cannot precede check-in.")

        row = self._store.update(ATTENDANCE_RECORDS, record.id, {"check_out_time": instant.isoformat(sep=" ")})
        return AttendanceRecord.from_row(row)

    def records_for_session(self, session_id: str) -> list[AttendanceRecord]:
        rows = self._store.query(ATTENDANCE_RECORDS, {"session_id": session_id})
        return [AttendanceRecord.from_row(row) for row in rows]

    def records_for_date(self, day: date) -> list[AttendanceRecord]:
        rows = self._store.query(ATTENDANCE_RECORDS, {"date": day.isoformat()})
        records = [AttendanceRecord.from_row(row) for row in rows]
        return sorted(records, key=lambda record: record.check_in_time or datetime.min, reverse=True)
