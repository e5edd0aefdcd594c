from __future__ import annotations

import logging
from pathlib import Path

from tallycheck.config.settings import Settings
from tallycheck.data import Database, DataStore, SQLiteStore
from tallycheck.services import (
    AttendanceResolver,
    BeaconService,
    CheckInService,
    CheckInTokenManager,
    SessionService,
)
from tallycheck.utils import Clock, SystemClock

logger = logging.getLogger(__name__)


class AttendanceEngine:
    """Wires the store, the clock and every service for a UI layer to consume."""

    def __init__(
        self,
        store: DataStore,
        *,
        clock: Clock | None = None,
        enforce_single_active_token: bool = True,
        default_token_minutes: int = 15,
    ) -> None:
        self.store = store
        self.clock = clock or SystemClock()
        self.default_token_minutes = default_token_minutes

        self.beacons = BeaconService(store, clock=self.clock)
        self.sessions = SessionService(store, self.beacons, clock=self.clock)
        self.tokens = CheckInTokenManager(
            store,
            clock=self.clock,
            enforce_single_active=enforce_single_active_token,
        )
        self.attendance = AttendanceResolver(store, clock=self.clock)
        self.check_ins = CheckInService(
            self.sessions,
            self.tokens,
            self.beacons,
            self.attendance,
            clock=self.clock,
        )

    @classmethod
    def open(cls, db_path: Path, *, clock: Clock | None = None, **options) -> "AttendanceEngine":
        store = SQLiteStore(Database(db_path))
        store.initialize()
        logger.info("Attendance database ready at %s", db_path)
        return cls(store, clock=clock, **options)

    @classmethod
    def from_settings(cls, settings: Settings, *, clock: Clock | None = None) -> "AttendanceEngine":
        return cls.open(
            settings.database_path,
            clock=clock,
            enforce_single_active_token=settings.enforce_single_active_token,
            default_token_minutes=settings.default_token_minutes,
        )

    def create_token(self, course_id: str, course_name: str | None = None, duration_minutes: int | None = None):
        minutes = self.default_token_minutes if duration_minutes is None else duration_minutes
        return self.tokens.create_token(course_id, course_name, minutes)
