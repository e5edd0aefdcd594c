from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta

from tallycheck.data import CHECK_IN_TOKENS, DataStore
from tallycheck.errors import CheckInFailure, CheckInRejectedError, ConflictError, NotFoundError, ValidationError
from tallycheck.models import CheckInToken, TokenHistoryEntry
from tallycheck.utils import Clock, SystemClock

logger = logging.getLogger(__name__)

MIN_DURATION_MINUTES = 5
MAX_DURATION_MINUTES = 180


def is_expired(token: CheckInToken, now: datetime) -> bool:
    return now >= token.expires_at


def remaining_seconds(token: CheckInToken, now: datetime) -> int:
    return max(0, int((token.expires_at - now).total_seconds()))


def validate_duration(duration_minutes: int) -> int:
    if isinstance(duration_minutes, bool) or not isinstance(duration_minutes, int):
        raise ValidationError("Token duration must be a whole number of minutes.")
    if not MIN_DURATION_MINUTES <= duration_minutes <= MAX_DURATION_MINUTES:
        raise ValidationError(
            f"Token duration must be between {MIN_DURATION_MINUTES} and {MAX_DURATION_MINUTES} minutes."
        )
    return duration_minutes


class CheckInTokenManager:
    """Issues course-scoped QR check-in tokens.

    Expiry is never scheduled; it is recomputed from ``expires_at`` on every
    read. Tokens are kept forever so the issuing history can be listed.
    """

    def __init__(
        self,
        store: DataStore,
        *,
        clock: Clock | None = None,
        enforce_single_active: bool = True,
    ) -> None:
        self._store = store
        self._clock = clock or SystemClock()
        self._enforce_single_active = enforce_single_active

    def create_token(self, course_id: str, course_name: str | None, duration_minutes: int) -> CheckInToken:
        minutes = validate_duration(duration_minutes)
        now = self._clock.now()

        if self._enforce_single_active:
            active = self.get_active_token(course_id, now=now)
            if active is not None:
                raise ConflictError(
                    f"Course {course_id} already has an active check-in token until {active.expires_at:%H:%M}."
                )

        token = CheckInToken(
            id=uuid.uuid4().hex,
            course_id=course_id,
            course_name=course_name,
            created_at=now,
            expires_at=now + timedelta(minutes=minutes),
        )
        row = self._store.insert(CHECK_IN_TOKENS, token.to_row())
        logger.info("Issued check-in token %s for course %s (%s min)", token.id, course_id, minutes)
        return CheckInToken.from_row(row)

    def get_active_token(self, course_id: str, *, now: datetime | None = None) -> CheckInToken | None:
        reference = now or self._clock.now()
        active = [token for token in self._tokens_for(course_id) if not is_expired(token, reference)]
        return active[0] if active else None

    def list_history(self, course_id: str, *, now: datetime | None = None) -> list[TokenHistoryEntry]:
        reference = now or self._clock.now()
        return [
            TokenHistoryEntry(token=token, active=not is_expired(token, reference))
            for token in self._tokens_for(course_id)
        ]

    def get_token(self, token_id: str) -> CheckInToken:
        row = self._store.get(CHECK_IN_TOKENS, token_id)
        if row is None:
            raise NotFoundError(f"Check-in token {token_id!r} does not exist.")
        return CheckInToken.from_row(row)

    def validate_token(self, token_id: str, *, now: datetime | None = None) -> CheckInToken:
        token = self.get_token(token_id)
        if is_expired(token, now or self._clock.now()):
            raise CheckInRejectedError(CheckInFailure.TOKEN_EXPIRED)
        return token

    def _tokens_for(self, course_id: str) -> list[CheckInToken]:
        """Tokens of a course, newest first; insertion order breaks timestamp ties."""

        rows = self._store.query(CHECK_IN_TOKENS, {"course_id": course_id})
        ordered = sorted(
            enumerate(CheckInToken.from_row(row) for row in rows),
            key=lambda item: (item[1].created_at, item[0]),
            reverse=True,
        )
        return [token for _, token in ordered]
