from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum
from typing import Any, Mapping, Optional

from tallycheck.models._rows import dump_date, dump_datetime, dump_time, load_date, load_datetime, load_time


class SessionStatus(str, Enum):
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"


# Lower sorts first when listing sessions.
STATUS_PRIORITY = {
    SessionStatus.ONGOING: 0,
    SessionStatus.UPCOMING: 1,
    SessionStatus.COMPLETED: 2,
}


@dataclass(slots=True)
class ClassSession:
    course_id: str
    session_date: date
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    location: Optional[str] = None
    beacon_id: Optional[str] = None
    attendance_window_start: Optional[datetime] = None
    attendance_window_end: Optional[datetime] = None
    course_name: Optional[str] = None
    created_by: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    def scheduled_start(self) -> datetime | None:
        if self.start_time is None:
            return None
        return datetime.combine(self.session_date, self.start_time)

    def scheduled_end(self) -> datetime | None:
        if self.end_time is None:
            return None
        return datetime.combine(self.session_date, self.end_time)

    def to_row(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "course_id": self.course_id,
            "course_name": self.course_name,
            "session_date": dump_date(self.session_date),
            "start_time": dump_time(self.start_time),
            "end_time": dump_time(self.end_time),
            "location": self.location,
            "beacon_id": self.beacon_id,
            "attendance_window_start": dump_datetime(self.attendance_window_start),
            "attendance_window_end": dump_datetime(self.attendance_window_end),
            "created_by": self.created_by,
            "created_at": dump_datetime(self.created_at),
        }

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "ClassSession":
        return cls(
            id=row["id"],
            course_id=row["course_id"],
            course_name=row.get("course_name"),
            session_date=load_date(row["session_date"]),
            start_time=load_time(row.get("start_time")),
            end_time=load_time(row.get("end_time")),
            location=row.get("location"),
            beacon_id=row.get("beacon_id"),
            attendance_window_start=load_datetime(row.get("attendance_window_start")),
            attendance_window_end=load_datetime(row.get("attendance_window_end")),
            created_by=row.get("created_by"),
            created_at=load_datetime(row.get("created_at")),
        )
