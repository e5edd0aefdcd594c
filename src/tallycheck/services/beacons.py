from __future__ import annotations

import logging
import uuid
from typing import Iterable

from tallycheck.data import BEACON_ASSIGNMENTS, BEACONS, SESSIONS, DataStore
from tallycheck.errors import NotFoundError, ValidationError
from tallycheck.models import Beacon, BeaconAssignment, normalize_mac_address
from tallycheck.utils import Clock, SystemClock

logger = logging.getLogger(__name__)


def resolve_beacon(
    assignments: Iterable[BeaconAssignment],
    course_id: str,
    session_id: str | None = None,
    explicit_beacon_id: str | None = None,
) -> str | None:
    """Pick the beacon that authorizes BLE check-in for a course session.

    Priority: an explicitly chosen beacon, then the first session-level
    override for ``session_id``, then the first course-level default.
    "First" follows the order of ``assignments``.
    """

    if explicit_beacon_id:
        return explicit_beacon_id

    candidates = [assignment for assignment in assignments if assignment.course_id == course_id]

    if session_id is not None:
        for assignment in candidates:
            if assignment.session_id == session_id:
                return assignment.beacon_id

    for assignment in candidates:
        if assignment.is_course_default:
            return assignment.beacon_id

    return None


class BeaconService:
    def __init__(self, store: DataStore, *, clock: Clock | None = None) -> None:
        self._store = store
        self._clock = clock or SystemClock()

    def register_beacon(
        self,
        name: str,
        mac_address: str,
        *,
        uuid_value: str | None = None,
        major: int | None = None,
        minor: int | None = None,
        location: str | None = None,
        is_active: bool = True,
    ) -> Beacon:
        if not name or not name.strip():
            raise ValidationError("Beacon name is required.")
        if not mac_address or not mac_address.strip():
            raise ValidationError("Beacon MAC address is required.")

        beacon = Beacon(
            id=uuid.uuid4().hex,
            name=name.strip(),
            mac_address=normalize_mac_address(mac_address),
            uuid=uuid_value or str(uuid.uuid4()),
            major=major,
            minor=minor,
            location=location,
            is_active=is_active,
            created_at=self._clock.now(),
        )
        row = self._store.insert(BEACONS, beacon.to_row())
        logger.info("Registered beacon %s (%s)", beacon.name, beacon.mac_address)
        return Beacon.from_row(row)

    def get_beacon(self, beacon_id: str) -> Beacon:
        row = self._store.get(BEACONS, beacon_id)
        if row is None:
            raise NotFoundError(f"Beacon {beacon_id!r} does not exist.")
        return Beacon.from_row(row)

    def find_by_mac(self, mac_address: str, *, active_only: bool = True) -> Beacon | None:
        rows = self._store.query(BEACONS, {"mac_address": normalize_mac_address(mac_address)})
        for row in rows:
            beacon = Beacon.from_row(row)
            if beacon.is_active or not active_only:
                return beacon
        return None

    def set_active(self, beacon_id: str, is_active: bool) -> Beacon:
        self.get_beacon(beacon_id)
        row = self._store.update(BEACONS, beacon_id, {"is_active": 1 if is_active else 0})
        return Beacon.from_row(row)

    def assign(self, beacon_id: str, course_id: str, session_id: str | None = None) -> BeaconAssignment:
        self.get_beacon(beacon_id)

        if session_id is not None:
            session_row = self._store.get(SESSIONS, session_id)
            if session_row is None:
                raise NotFoundError(f"Session {session_id!r} does not exist.")
            if session_row["course_id"] != course_id:
                raise ValidationError("A session-level beacon assignment must use the session's own course.")

        assignment = BeaconAssignment(
            id=uuid.uuid4().hex,
            beacon_id=beacon_id,
            course_id=course_id,
            session_id=session_id,
            created_at=self._clock.now(),
        )
        row = self._store.insert(BEACON_ASSIGNMENTS, assignment.to_row())
        logger.info(
            "Assigned beacon %s to course %s%s",
            beacon_id,
            course_id,
            f" (session {session_id})" if session_id else "",
        )
        return BeaconAssignment.from_row(row)

    def unassign(self, assignment_id: str) -> None:
        self._store.delete(BEACON_ASSIGNMENTS, assignment_id)

    def assignments_for_course(self, course_id: str) -> list[BeaconAssignment]:
        rows = self._store.query(BEACON_ASSIGNMENTS, {"course_id": course_id})
        return [BeaconAssignment.from_row(row) for row in rows]

    def resolve_beacon(
        self,
        course_id: str,
        session_id: str | None = None,
        explicit_beacon_id: str | None = None,
    ) -> str | None:
        if explicit_beacon_id:
            return explicit_beacon_id
        beacon_id = resolve_beacon(self.assignments_for_course(course_id), course_id, session_id)
        logger.debug("Resolved beacon for course %s session %s: %s", course_id, session_id, beacon_id)
        return beacon_id

    def delete_beacon(self, beacon_id: str) -> None:
        """Remove a beacon after detaching it from assignments and sessions that froze it."""

        with self._store.transaction():
            self.get_beacon(beacon_id)

            for row in self._store.query(BEACON_ASSIGNMENTS, {"beacon_id": beacon_id}):
                self._store.delete(BEACON_ASSIGNMENTS, row["id"])

            for row in self._store.query(SESSIONS, {"beacon_id": beacon_id}):
                self._store.update(SESSIONS, row["id"], {"beacon_id": None})

            self._store.delete(BEACONS, beacon_id)
        logger.info("Deleted beacon %s", beacon_id)
