from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from typing import Any, ContextManager, Iterator, Mapping, Protocol

from tallycheck.data.database import Database
from tallycheck.errors import ConflictError, NotFoundError, PersistenceError, ValidationError

logger = logging.getLogger(__name__)

SESSIONS = "sessions"
CHECK_IN_TOKENS = "check_in_tokens"
BEACONS = "beacons"
BEACON_ASSIGNMENTS = "beacon_assignments"
ATTENDANCE_RECORDS = "attendance_records"

ENTITY_TABLES = {
    SESSIONS: "class_sessions",
    CHECK_IN_TOKENS: "check_in_tokens",
    BEACONS: "ble_beacons",
    BEACON_ASSIGNMENTS: "beacon_assignments",
    ATTENDANCE_RECORDS: "attendance_records",
}


class DataStore(Protocol):
    def get(self, entity: str, record_id: str) -> dict | None: ...

    def query(self, entity: str, filter: Mapping[str, Any] | None = None) -> list[dict]: ...

    def insert(self, entity: str, record: Mapping[str, Any]) -> dict: ...

    def update(self, entity: str, record_id: str, patch: Mapping[str, Any]) -> dict: ...

    def delete(self, entity: str, record_id: str) -> None: ...

    def transaction(self) -> ContextManager[Any]: ...


class SQLiteStore:
    """Entity-oriented access to the SQLite schema.

    Every call opens its own connection and commits on success, unless it
    runs inside ``transaction()``, where all calls share one connection that
    commits once at the end or rolls back entirely. ``query`` matches on
    column equality (``None`` matches NULL) and returns rows in insertion
    order.
    """

    def __init__(self, database: Database) -> None:
        self._database = database
        self._columns: dict[str, frozenset[str]] = {}
        self._shared: sqlite3.Connection | None = None

    def initialize(self) -> None:
        self._database.initialize()

    @contextmanager
    def transaction(self) -> Iterator["SQLiteStore"]:
        if self._shared is not None:
            # Nested transactions join the outer one.
            yield self
            return

        with _TranslatedConnection(self._database) as connection:
            self._shared = connection
            try:
                yield self
            finally:
                self._shared = None

    def get(self, entity: str, record_id: str) -> dict | None:
        table = self._table(entity)
        with self._connection() as connection:
            row = connection.execute(f"SELECT * FROM {table} WHERE id = ?", (record_id,)).fetchone()
        return dict(row) if row else None

    def query(self, entity: str, filter: Mapping[str, Any] | None = None) -> list[dict]:
        table = self._table(entity)
        conditions: list[str] = []
        params: list[Any] = []

        for column, value in (filter or {}).items():
            self._check_column(entity, column)
            if value is None:
                conditions.append(f"{column} IS NULL")
            else:
                conditions.append(f"{column} = ?")
                params.append(value)

        sql = f"SELECT * FROM {table}"
        if conditions:
            sql += " WHERE " + " AND ".join(conditions)
        sql += " ORDER BY rowid ASC"

        with self._connection() as connection:
            rows = connection.execute(sql, tuple(params)).fetchall()
        return [dict(row) for row in rows]

    def insert(self, entity: str, record: Mapping[str, Any]) -> dict:
        table = self._table(entity)
        payload = {key: value for key, value in record.items() if value is not None}
        if "id" not in payload:
            raise ValidationError(f"Cannot insert into {entity} without an id.")
        for column in payload:
            self._check_column(entity, column)

        columns = ", ".join(payload)
        placeholders = ", ".join(["?"] * len(payload))
        with self._connection() as connection:
            connection.execute(
                f"INSERT INTO {table} ({columns}) VALUES ({placeholders})",
                tuple(payload.values()),
            )
            row = connection.execute(f"SELECT * FROM {table} WHERE id = ?", (payload["id"],)).fetchone()
        return dict(row)

    def update(self, entity: str, record_id: str, patch: Mapping[str, Any]) -> dict:
        table = self._table(entity)
        changes = {key: value for key, value in patch.items() if key != "id"}
        for column in changes:
            self._check_column(entity, column)

        with self._connection() as connection:
            if changes:
                assignments = ", ".join(f"{column} = ?" for column in changes)
                cursor = connection.execute(
                    f"UPDATE {table} SET {assignments} WHERE id = ?",
                    (*changes.values(), record_id),
                )
                if cursor.rowcount == 0:
                    raise NotFoundError(f"No {entity} row with id {record_id!r}.")
            row = connection.execute(f"SELECT * FROM {table} WHERE id = ?", (record_id,)).fetchone()

        if row is None:
            raise NotFoundError(f"No {entity} row with id {record_id!r}.")
        return dict(row)

    def delete(self, entity: str, record_id: str) -> None:
        table = self._table(entity)
        with self._connection() as connection:
            cursor = connection.execute(f"DELETE FROM {table} WHERE id = ?", (record_id,))
            if cursor.rowcount == 0:
                raise NotFoundError(f"No {entity} row with id {record_id!r}.")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        if self._shared is None:
            with _TranslatedConnection(self._database) as connection:
                yield connection
            return

        try:
            yield self._shared
        except sqlite3.Error as exc:
            raise _translate(exc) from exc

    @staticmethod
    def _table(entity: str) -> str:
        try:
            return ENTITY_TABLES[entity]
        except KeyError as exc:
            raise ValidationError(f"Unknown entity: {entity!r}") from exc

    def _check_column(self, entity: str, column: str) -> None:
        columns = self._columns.get(entity)
        if columns is None:
            table = self._table(entity)
            with self._connection() as connection:
                columns = frozenset(row["name"] for row in connection.execute(f"PRAGMA table_info({table})"))
            self._columns[entity] = columns
        if column not in columns:
            raise ValidationError(f"Unknown field {column!r} for {entity}.")


class _TranslatedConnection:
    """Wraps ``Database.connect`` so sqlite failures surface as engine errors."""

    def __init__(self, database: Database) -> None:
        self._context = database.connect()

    def __enter__(self) -> sqlite3.Connection:
        try:
            return self._context.__enter__()
        except sqlite3.Error as exc:
            raise PersistenceError(f"Could not open the attendance database: {exc}") from exc

    def __exit__(self, exc_type, exc, tb) -> bool:
        try:
            self._context.__exit__(exc_type, exc, tb)
        except sqlite3.Error as error:
            raise _translate(error) from error
        if isinstance(exc, sqlite3.Error):
            raise _translate(exc) from exc
        return False


def _translate(error: sqlite3.Error) -> Exception:
    if isinstance(error, sqlite3.IntegrityError) and "UNIQUE" in str(error).upper():
        logger.warning("Uniqueness conflict: %s", error)
        return ConflictError(str(error))
    return PersistenceError(str(error))
