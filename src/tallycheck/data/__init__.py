from .database import Database
from .store import (
    ATTENDANCE_RECORDS,
    BEACON_ASSIGNMENTS,
    BEACONS,
    CHECK_IN_TOKENS,
    SESSIONS,
    DataStore,
    SQLiteStore,
)

__all__ = [
    "ATTENDANCE_RECORDS",
    "BEACON_ASSIGNMENTS",
    "BEACONS",
    "CHECK_IN_TOKENS",
    "SESSIONS",
    "DataStore",
    "Database",
    "SQLiteStore",
]
