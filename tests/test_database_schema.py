from __future__ import annotations

from pathlib import Path

import pytest

from tallycheck.data import SESSIONS, Database, SQLiteStore
from tallycheck.errors import ConflictError, NotFoundError, PersistenceError, ValidationError


def test_initialize_creates_tables(tmp_path: Path) -> None:
    db_path = tmp_path / "attendance.db"
    database = Database(db_path)
    database.initialize()

    with database.connect() as connection:
        tables = {
            row[0]
            for row in connection.execute(
                "SELECT name FROM sqlite_master WHERE type='table'"
            )
        }

    expected_tables = {
        "class_sessions",
        "check_in_tokens",
        "ble_beacons",
        "beacon_assignments",
        "attendance_records",
        "schema_migrations",
    }

    assert expected_tables.issubset(tables)


def test_initialize_is_repeatable(tmp_path: Path) -> None:
    database = Database(tmp_path / "attendance.db")
    database.initialize()
    database.initialize()

    with database.connect() as connection:
        applied = connection.execute("SELECT COUNT(*) FROM schema_migrations").fetchone()[0]

    assert applied == 1


def test_store_roundtrip_and_null_filter(store: SQLiteStore) -> None:
    store.insert(SESSIONS, {"id": "S1", "course_id": "C1", "session_date": "2025-10-02", "location": "A101"})
    store.insert(SESSIONS, {"id": "S2", "course_id": "C1", "session_date": "2025-10-03"})

    assert store.get(SESSIONS, "S1")["location"] == "A101"
    assert store.get(SESSIONS, "missing") is None
    assert [row["id"] for row in store.query(SESSIONS, {"course_id": "C1"})] == ["S1", "S2"]
    assert [row["id"] for row in store.query(SESSIONS, {"location": None})] == ["S2"]

    updated = store.update(SESSIONS, "S2", {"location": "B201"})
    assert updated["location"] == "B201"


def test_store_error_translation(store: SQLiteStore) -> None:
    store.insert("attendance_records", {
        "id": "R1",
        "student_id": "ST1",
        "course_id": "C1",
        "session_id": None,
        "method": "QR",
        "status": "verified",
        "date": "2025-10-02",
    })

    with pytest.raises(ConflictError):
        store.insert("attendance_records", {
            "id": "R1",
            "student_id": "ST2",
            "course_id": "C1",
            "method": "QR",
            "status": "verified",
            "date": "2025-10-02",
        })

    with pytest.raises(PersistenceError):
        store.insert("attendance_records", {
            "id": "R2",
            "student_id": "ST2",
            "course_id": "C1",
            "session_id": "does-not-exist",
            "method": "QR",
            "status": "verified",
            "date": "2025-10-02",
        })

    with pytest.raises(NotFoundError):
        store.update(SESSIONS, "missing", {"location": "X"})

    with pytest.raises(NotFoundError):
        store.delete(SESSIONS, "missing")

    with pytest.raises(ValidationError):
        store.query(SESSIONS, {"location; DROP TABLE class_sessions": 1})

    with pytest.raises(ValidationError):
        store.query("courses")
