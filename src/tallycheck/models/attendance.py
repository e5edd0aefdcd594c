from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Mapping, Optional

from tallycheck.errors import ValidationError
from tallycheck.models._rows import dump_date, dump_datetime, load_date, load_datetime


class CheckInMethod(str, Enum):
    BLE = "BLE"
    QR = "QR"
    MANUAL = "MANUAL"

    @classmethod
    def parse(cls, value: "CheckInMethod | str") -> "CheckInMethod":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError as exc:
            raise ValidationError(f"Unknown check-in method: {value!r}") from exc


class AttendanceStatus(str, Enum):
    VERIFIED = "verified"
    PENDING = "pending"
    ABSENT = "absent"

    @classmethod
    def parse(cls, value: "AttendanceStatus | str") -> "AttendanceStatus":
        if isinstance(value, cls):
            return value
        cleaned = str(value).strip().lower()
        legacy = LEGACY_STATUS_ALIASES.get(cleaned)
        if legacy is not None:
            return legacy.normalized
        try:
            return cls(cleaned)
        except ValueError as exc:
            raise ValidationError(f"Unknown attendance status: {value!r}") from exc


class LegacyStatus(str, Enum):
    """Status values written by older dashboard views."""

    PRESENT = "present"
    LATE = "late"

    @property
    def normalized(self) -> AttendanceStatus:
        if self is LegacyStatus.PRESENT:
            return AttendanceStatus.VERIFIED
        return AttendanceStatus.PENDING


LEGACY_STATUS_ALIASES = {status.value: status for status in LegacyStatus}


@dataclass(slots=True)
class AttendanceRecord:
    student_id: str
    course_id: str
    session_id: Optional[str]
    method: CheckInMethod
    status: AttendanceStatus
    date: date
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    student_name: Optional[str] = None
    course_code: Optional[str] = None
    verified_by: Optional[str] = None
    verified_at: Optional[datetime] = None
    id: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def manually_decided(self) -> bool:
        return self.verified_by is not None

    def to_row(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "student_id": self.student_id,
            "student_name": self.student_name,
            "course_id": self.course_id,
            "course_code": self.course_code,
            "session_id": self.session_id,
            "check_in_time": dump_datetime(self.check_in_time),
            "check_out_time": dump_datetime(self.check_out_time),
            "method": self.method.value,
            "status": self.status.value,
            "date": dump_date(self.date),
            "verified_by": self.verified_by,
            "verified_at": dump_datetime(self.verified_at),
            "created_at": dump_datetime(self.created_at),
        }

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "AttendanceRecord":
        return cls(
            id=row["id"],
            student_id=row["student_id"],
            student_name=row.get("student_name"),
            course_id=row["course_id"],
            course_code=row.get("course_code"),
            session_id=row.get("session_id"),
            check_in_time=load_datetime(row.get("check_in_time")),
            check_out_time=load_datetime(row.get("check_out_time")),
            method=CheckInMethod.parse(row["method"]),
            status=AttendanceStatus.parse(row["status"]),
            date=load_date(row["date"]),
            verified_by=row.get("verified_by"),
            verified_at=load_datetime(row.get("verified_at")),
            created_at=load_datetime(row.get("created_at")) or datetime.now(),
        )
