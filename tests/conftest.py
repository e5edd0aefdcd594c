from __future__ import annotations

from datetime import datetime

import pytest

from tallycheck import AttendanceEngine
from tallycheck.data import Database, SQLiteStore
from tallycheck.utils import FixedClock


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2025, 10, 2, 9, 5))


@pytest.fixture
def database(tmp_path) -> Database:
    database = Database(tmp_path / "attendance.db")
    database.initialize()
    return database


@pytest.fixture
def store(database) -> SQLiteStore:
    return SQLiteStore(database)


@pytest.fixture
def engine(store, clock) -> AttendanceEngine:
    return AttendanceEngine(store, clock=clock)
