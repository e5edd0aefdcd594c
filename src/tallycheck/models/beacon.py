from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from tallycheck.models._rows import dump_datetime, load_datetime


def normalize_mac_address(value: str) -> str:
    return value.strip().upper().replace("-", ":")


@dataclass(slots=True)
class Beacon:
    name: str
    mac_address: str
    uuid: Optional[str] = None
    major: Optional[int] = None
    minor: Optional[int] = None
    location: Optional[str] = None
    is_active: bool = True
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_row(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "mac_address": normalize_mac_address(self.mac_address),
            "uuid": self.uuid,
            "major": self.major,
            "minor": self.minor,
            "location": self.location,
            "is_active": 1 if self.is_active else 0,
            "created_at": dump_datetime(self.created_at),
        }

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Beacon":
        return cls(
            id=row["id"],
            name=row["name"],
            mac_address=row["mac_address"],
            uuid=row.get("uuid"),
            major=row.get("major"),
            minor=row.get("minor"),
            location=row.get("location"),
            is_active=bool(row.get("is_active", 1)),
            created_at=load_datetime(row.get("created_at")),
        )


@dataclass(slots=True)
class BeaconAssignment:
    """Binds a beacon to a course, or to one session of that course when ``session_id`` is set."""

    beacon_id: str
    course_id: str
    session_id: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def is_course_default(self) -> bool:
        return self.session_id is None

    def to_row(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "beacon_id": self.beacon_id,
            "course_id": self.course_id,
            "session_id": self.session_id,
            "created_at": dump_datetime(self.created_at),
        }

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "BeaconAssignment":
        return cls(
            id=row["id"],
            beacon_id=row["beacon_id"],
            course_id=row["course_id"],
            session_id=row.get("session_id"),
            created_at=load_datetime(row.get("created_at")),
        )
