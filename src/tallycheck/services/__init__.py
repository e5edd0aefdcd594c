from .attendance_resolver import AttendanceResolver, derive_status
from .attendance_window import is_within_window, window_bounds
from .beacons import BeaconService, resolve_beacon
from .check_in import CheckInService
from .qr_codes import TokenPayload, decode_token_payload, encode_token_payload, render_token_qr
from .reporting import AttendanceSummary, attendance_rate, summarize
from .session_service import SessionService
from .session_status import classify, compare_sessions, priority_key, sort_by_priority
from .token_manager import (
    MAX_DURATION_MINUTES,
    MIN_DURATION_MINUTES,
    CheckInTokenManager,
    is_expired,
    remaining_seconds,
)

__all__ = [
    "AttendanceResolver",
    "AttendanceSummary",
    "BeaconService",
    "CheckInService",
    "CheckInTokenManager",
    "MAX_DURATION_MINUTES",
    "MIN_DURATION_MINUTES",
    "SessionService",
    "TokenPayload",
    "attendance_rate",
    "classify",
    "compare_sessions",
    "decode_token_payload",
    "derive_status",
    "encode_token_payload",
    "is_expired",
    "is_within_window",
    "priority_key",
    "remaining_seconds",
    "render_token_qr",
    "resolve_beacon",
    "sort_by_priority",
    "summarize",
    "window_bounds",
]
