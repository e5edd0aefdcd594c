import logging

from .engine import AttendanceEngine
from .errors import (
    AttendanceError,
    CheckInFailure,
    CheckInRejectedError,
    ConflictError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "AttendanceEngine",
    "AttendanceError",
    "CheckInFailure",
    "CheckInRejectedError",
    "ConflictError",
    "NotFoundError",
    "PersistenceError",
    "ValidationError",
]
