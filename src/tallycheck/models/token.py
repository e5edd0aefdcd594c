from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional

from tallycheck.models._rows import dump_datetime, load_datetime


@dataclass(slots=True, frozen=True)
class CheckInToken:
    course_id: str
    created_at: datetime
    expires_at: datetime
    course_name: Optional[str] = None
    id: Optional[str] = None

    def to_row(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "course_id": self.course_id,
            "course_name": self.course_name,
            "created_at": dump_datetime(self.created_at),
            "expires_at": dump_datetime(self.expires_at),
        }

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "CheckInToken":
        return cls(
            id=row["id"],
            course_id=row["course_id"],
            course_name=row.get("course_name"),
            created_at=load_datetime(row["created_at"]),
            expires_at=load_datetime(row["expires_at"]),
        )


@dataclass(slots=True, frozen=True)
class TokenHistoryEntry:
    token: CheckInToken
    active: bool

    @property
    def state(self) -> str:
        return "active" if self.active else "expired"
