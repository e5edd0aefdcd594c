from __future__ import annotations

import logging
from datetime import datetime

from tallycheck.errors import CheckInFailure, CheckInRejectedError
from tallycheck.models import AttendanceRecord, CheckInMethod, ClassSession, SessionStatus
from tallycheck.services.attendance_resolver import AttendanceResolver
from tallycheck.services.attendance_window import is_within_window
from tallycheck.services.beacons import BeaconService
from tallycheck.services.qr_codes import decode_token_payload
from tallycheck.services.session_service import SessionService
from tallycheck.services.session_status import classify
from tallycheck.services.token_manager import CheckInTokenManager
from tallycheck.utils import Clock, SystemClock

logger = logging.getLogger(__name__)


class CheckInService:
    """Entry point for BLE and QR scan handlers.

    Every rejection raises :class:`CheckInRejectedError` with a specific
    reason. A check-in outside the attendance window is accepted and recorded
    as ``pending``.
    """

    def __init__(
        self,
        sessions: SessionService,
        tokens: CheckInTokenManager,
        beacons: BeaconService,
        resolver: AttendanceResolver,
        *,
        clock: Clock | None = None,
    ) -> None:
        self._sessions = sessions
        self._tokens = tokens
        self._beacons = beacons
        self._resolver = resolver
        self._clock = clock or SystemClock()

    def submit_check_in(
        self,
        student_id: str,
        session_id: str,
        method: CheckInMethod | str,
        instant: datetime | None = None,
        *,
        beacon_id: str | None = None,
        student_name: str | None = None,
    ) -> AttendanceRecord:
        method = CheckInMethod.parse(method)
        session = self._sessions.get_session(session_id)

        if method is CheckInMethod.BLE:
            if session.beacon_id is None:
                self._reject(CheckInFailure.NO_BEACON_BOUND, student_id, session_id)
            if beacon_id is not None and beacon_id != session.beacon_id:
                self._reject(CheckInFailure.BEACON_MISMATCH, student_id, session_id)

        return self._resolver.resolve_check_in(
            student_id,
            session,
            method,
            instant or self._clock.now(),
            student_name=student_name,
        )

    def submit_qr_check_in(
        self,
        student_id: str,
        session_id: str,
        scanned: bytes | str,
        instant: datetime | None = None,
        *,
        student_name: str | None = None,
    ) -> AttendanceRecord:
        moment = instant or self._clock.now()
        payload = decode_token_payload(scanned)
        token = self._tokens.validate_token(payload.token_id, now=moment)
        session = self._sessions.get_session(session_id)

        if token.course_id != session.course_id:
            self._reject(CheckInFailure.TOKEN_COURSE_MISMATCH, student_id, session_id)

        return self._resolver.resolve_check_in(
            student_id,
            session,
            CheckInMethod.QR,
            moment,
            student_name=student_name,
        )

    def submit_ble_check_in(
        self,
        student_id: str,
        mac_address: str,
        instant: datetime | None = None,
        *,
        student_name: str | None = None,
    ) -> AttendanceRecord:
        """Check in from a beacon sighting, choosing the session that beacon serves right now."""

        moment = instant or self._clock.now()
        beacon = self._beacons.find_by_mac(mac_address)
        if beacon is None:
            self._reject(CheckInFailure.UNKNOWN_BEACON, student_id, None)

        session = self._current_session_for_beacon(beacon.id, moment)
        if session is None:
            self._reject(CheckInFailure.NO_ACTIVE_SESSION, student_id, None)

        return self._resolver.resolve_check_in(
            student_id,
            session,
            CheckInMethod.BLE,
            moment,
            student_name=student_name,
        )

    def _current_session_for_beacon(self, beacon_id: str, moment: datetime) -> ClassSession | None:
        for session in self._sessions.sessions_for_beacon(beacon_id, moment.date()):
            if is_within_window(session, moment) or classify(session, moment) is SessionStatus.ONGOING:
                return session
        return None

    @staticmethod
    def _reject(reason: CheckInFailure, student_id: str, session_id: str | None) -> None:
        logger.warning("Rejected check-in for student %s (session %s): %s", student_id, session_id, reason.value)
        raise CheckInRejectedError(reason)
