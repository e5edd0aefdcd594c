from __future__ import annotations

from enum import Enum


class AttendanceError(Exception):
    """Base class for every failure surfaced by the attendance engine."""


class ValidationError(AttendanceError, ValueError):
    """Raised when caller input is malformed or out of range."""


class NotFoundError(AttendanceError, LookupError):
    """Raised when a referenced session, token, beacon or record does not exist."""


class PersistenceError(AttendanceError):
    """Raised when the backing store fails to complete an operation."""


class ConflictError(AttendanceError):
    """Raised when a write collides with a uniqueness rule."""


class CheckInFailure(str, Enum):
    NO_BEACON_BOUND = "no_beacon_bound"
    UNKNOWN_BEACON = "unknown_beacon"
    BEACON_MISMATCH = "beacon_mismatch"
    NO_ACTIVE_SESSION = "no_active_session"
    TOKEN_EXPIRED = "token_expired"
    TOKEN_COURSE_MISMATCH = "token_course_mismatch"


FAILURE_MESSAGES = {
    CheckInFailure.NO_BEACON_BOUND: "No beacon is bound to this session; BLE check-in is unavailable.",
    CheckInFailure.UNKNOWN_BEACON: "The scanned beacon is not registered or is inactive.",
    CheckInFailure.BEACON_MISMATCH: "The scanned beacon is not the one bound to this session.",
    CheckInFailure.NO_ACTIVE_SESSION: "No ongoing session is using this beacon right now.",
    CheckInFailure.TOKEN_EXPIRED: "The check-in code has expired.",
    CheckInFailure.TOKEN_COURSE_MISMATCH: "The check-in code belongs to a different course.",
}


class CheckInRejectedError(AttendanceError):
    """Raised when a check-in cannot be accepted; ``reason`` says why."""

    def __init__(self, reason: CheckInFailure, message: str | None = None) -> None:
        self.reason = reason
        super().__init__(message or FAILURE_MESSAGES[reason])
