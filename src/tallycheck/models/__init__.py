from .attendance import (
    AttendanceRecord,
    AttendanceStatus,
    CheckInMethod,
    LegacyStatus,
)
from .beacon import Beacon, BeaconAssignment, normalize_mac_address
from .session import STATUS_PRIORITY, ClassSession, SessionStatus
from .token import CheckInToken, TokenHistoryEntry

__all__ = [
    "AttendanceRecord",
    "AttendanceStatus",
    "Beacon",
    "BeaconAssignment",
    "CheckInMethod",
    "CheckInToken",
    "ClassSession",
    "LegacyStatus",
    "STATUS_PRIORITY",
    "SessionStatus",
    "TokenHistoryEntry",
    "normalize_mac_address",
]
