import math
from datetime import timedelta
from functools import wraps
from typing import NamedTuple

from flask import current_app
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from models import db
from models.login_attempt import LoginAttempt
from utils.clock import SystemClock, get_clock

MAX_ATTEMPTS = 3
LOCKOUT_MINUTES = 15
RETENTION_HOURS = 24

# Attempts with no usable origin all share this bucket
UNKNOWN_ORIGIN = "unknown"


class StorageUnavailable(RuntimeError):
    """The login attempt store could not be read or written."""


class LockoutStatus(NamedTuple):
    blocked: bool
    failed_attempts: int
    remaining_attempts: int
    retry_after_seconds: int


def normalize_identity(value: str) -> str:
    return (value or "").strip().lower()


def normalize_origin(value: str) -> str:
    return (value or "").strip() or UNKNOWN_ORIGIN


def storage_errors(fn):
    """Roll back and re-raise database failures as StorageUnavailable."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except SQLAlchemyError as exc:
            try:
                db.session.rollback()
            except SQLAlchemyError:
                pass  # the original error is what gets reported
            raise StorageUnavailable(str(exc)) from exc
    return wrapper


class LoginAttemptLedger:
    """
    Append-only ledger of login attempts plus the lockout policy on top of it.

    A pair (email, ip) is blocked once MAX_ATTEMPTS failures matching the email
    OR the ip happened inside the trailing LOCKOUT_MINUTES window. Unlocking is
    purely time based: there is no reset call and a successful login does not
    wipe earlier failures.
    """

    def __init__(self, clock=None, max_attempts: int = MAX_ATTEMPTS,
                 lockout_minutes: int = LOCKOUT_MINUTES,
                 retention_hours: int = RETENTION_HOURS):
        self.clock = clock or SystemClock()
        self.max_attempts = max_attempts
        self.lockout = timedelta(minutes=lockout_minutes)
        self.retention = timedelta(hours=retention_hours)

    def _failures_for(self, email: str, ip: str):
        return LoginAttempt.query.filter(
            or_(LoginAttempt.email == email, LoginAttempt.ip_address == ip),
            LoginAttempt.successful.is_(False),
        )

    @storage_errors
    def record(self, identity: str, origin: str, succeeded: bool) -> int:
        row = LoginAttempt(
            email=normalize_identity(identity),
            ip_address=normalize_origin(origin),
            successful=bool(succeeded),
            attempted_at=self.clock.now(),
        )
        db.session.add(row)
        db.session.commit()
        return row.id

    @storage_errors
    def recent_failed_attempts(self, identity: str, origin: str) -> int:
        since = self.clock.now() - self.lockout
        return (
            self._failures_for(normalize_identity(identity), normalize_origin(origin))
            .filter(LoginAttempt.attempted_at >= since)
            .count()
        )

    def is_blocked(self, identity: str, origin: str) -> bool:
        return self.recent_failed_attempts(identity, origin) >= self.max_attempts

    def remaining_attempts(self, identity: str, origin: str) -> int:
        return max(self.max_attempts - self.recent_failed_attempts(identity, origin), 0)

    @storage_errors
    def _seconds_until_unlock(self, identity: str, origin: str) -> int:
        last_failure = (
            self._failures_for(normalize_identity(identity), normalize_origin(origin))
            .order_by(LoginAttempt.attempted_at.desc())
            .first()
        )
        if not last_failure:
            return 0

        # only asked while blocked, so never report 0 for a pair that is still locked
        unlock_at = last_failure.attempted_at + self.lockout
        seconds = math.ceil((unlock_at - self.clock.now()).total_seconds())
        return max(seconds, 1)

    def remaining_lockout_seconds(self, identity: str, origin: str) -> int:
        """
        Seconds until the pair can try again, counted from the most recent
        matching failure. 0 when the pair is not blocked.
        """
        if not self.is_blocked(identity, origin):
            return 0
        return self._seconds_until_unlock(identity, origin)

    def status(self, identity: str, origin: str) -> LockoutStatus:
        failed = self.recent_failed_attempts(identity, origin)
        blocked = failed >= self.max_attempts
        retry_after = self._seconds_until_unlock(identity, origin) if blocked else 0
        return LockoutStatus(
            blocked=blocked,
            failed_attempts=failed,
            remaining_attempts=max(self.max_attempts - failed, 0),
            retry_after_seconds=retry_after,
        )

    @storage_errors
    def cleanup(self) -> int:
        """
        Deletes every attempt older than the retention period, failed or not.
        Storage hygiene only; it has no effect on lockouts.
        """
        cutoff = self.clock.now() - self.retention
        deleted = (
            LoginAttempt.query
            .filter(LoginAttempt.attempted_at < cutoff)
            .delete(synchronize_session=False)
        )
        db.session.commit()
        return deleted

    @storage_errors
    def clear_successful(self, identity: str) -> int:
        # Failed rows are the security signal and are never touched here
        deleted = (
            LoginAttempt.query
            .filter(
                LoginAttempt.email == normalize_identity(identity),
                LoginAttempt.successful.is_(True),
            )
            .delete(synchronize_session=False)
        )
        db.session.commit()
        return deleted


def get_ledger() -> LoginAttemptLedger:
    """Ledger configured from the current app."""
    return LoginAttemptLedger(
        clock=get_clock(),
        max_attempts=current_app.config.get("MAX_LOGIN_ATTEMPTS", MAX_ATTEMPTS),
        lockout_minutes=current_app.config.get("LOCKOUT_MINUTES", LOCKOUT_MINUTES),
        retention_hours=current_app.config.get("LOGIN_ATTEMPT_RETENTION_HOURS", RETENTION_HOURS),
    )
