"""Per-account failed-login ledger.

An account is locked while it has at least ``policy.threshold`` failed
attempts and the lockout window that started at its last failure has not
elapsed. Expired windows are cleared lazily, the next time the row is read.

Every operation runs as one transaction; rows are locked for the duration
so concurrent attempts against the same account cannot lose increments.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from datetime import timezone
from typing import Callable
from typing import Optional

from sqlalchemy.engine import Engine

from accounts.config import LockoutPolicy
from accounts.db.repositories import LoginAttemptRepository
from accounts.db.session import transaction
from accounts.utils.logging import get_logger
from accounts.utils.logging import hash_for_correlation

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def remaining_minutes(unlock_at: datetime, now: datetime) -> int:
    """Whole minutes until ``unlock_at``, rounded up, never less than 1."""
    seconds = (unlock_at - now).total_seconds()
    return max(1, math.ceil(seconds / 60))


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive datetimes; stored values are always UTC.
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class LockState:
    """Lock status of one account at a point in time."""

    locked: bool
    unlock_at: Optional[datetime]
    failed_attempts: int = 0


class LockoutLedger:
    """Reads and writes ``login_attempts`` rows for the login flow."""

    def __init__(
        self,
        engine: Engine,
        policy: Optional[LockoutPolicy] = None,
        clock: Clock = utcnow,
    ):
        self._engine = engine
        self._policy = policy or LockoutPolicy()
        self._clock = clock

    @property
    def policy(self) -> LockoutPolicy:
        return self._policy

    def now(self) -> datetime:
        return self._clock()

    def get_lock_state(self, account_id: str) -> LockState:
        """Return whether the account is locked and until when.

        Resets the counter when the window has elapsed since the last
        failure.
        """
        now = self._clock()
        with transaction(self._engine) as session:
            record = LoginAttemptRepository(session).get_for_update(account_id)
            if record is None:
                return LockState(locked=False, unlock_at=None)

            last_failed_at = _as_utc(record.last_failed_at)
            if last_failed_at is None:
                return LockState(
                    locked=False,
                    unlock_at=None,
                    failed_attempts=record.failed_attempts,
                )

            unlock_at = last_failed_at + self._policy.duration
            if now >= unlock_at:
                if record.failed_attempts > 0:
                    record.failed_attempts = 0
                    record.last_failed_at = None
                    logger.info(
                        "Lockout window expired, counter reset",
                        extra={"account": hash_for_correlation(account_id)},
                    )
                return LockState(locked=False, unlock_at=None)

            return LockState(
                locked=record.failed_attempts >= self._policy.threshold,
                unlock_at=unlock_at,
                failed_attempts=record.failed_attempts,
            )

    def record_success(self, account_id: str) -> None:
        """Clear the failure counter and stamp the login time."""
        now = self._clock()
        with transaction(self._engine) as session:
            record = LoginAttemptRepository(session).get_or_create_for_update(
                account_id
            )
            record.failed_attempts = 0
            record.last_failed_at = None
            record.last_login_at = now

    def record_failure(self, account_id: str) -> int:
        """Count one failed attempt.

        A counter whose window has already elapsed restarts from zero
        before the increment.

        Returns:
            The failure count after this attempt.
        """
        now = self._clock()
        with transaction(self._engine) as session:
            record = LoginAttemptRepository(session).get_or_create_for_update(
                account_id
            )
            last_failed_at = _as_utc(record.last_failed_at)
            if last_failed_at is not None and now >= last_failed_at + self._policy.duration:
                record.failed_attempts = 0
            record.failed_attempts += 1
            record.last_failed_at = now
            failed_attempts = record.failed_attempts

        logger.info(
            "Failed login recorded",
            extra={
                "account": hash_for_correlation(account_id),
                "failed_attempts": failed_attempts,
            },
        )
        return failed_attempts
