from datetime import datetime, timedelta, timezone

from flask import current_app


class SystemClock:
    """Wall clock. Returns naive UTC datetimes, matching the DateTime columns."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc).replace(tzinfo=None)


class FrozenClock:
    """
    Clock that only moves when told to, so lockout windows can be walked
    through deterministically in tests.
    """

    def __init__(self, start: datetime | None = None):
        self._now = start or SystemClock().now()

    def now(self) -> datetime:
        return self._now

    def set(self, value: datetime) -> None:
        self._now = value

    def advance(self, **kwargs) -> datetime:
        # kwargs go straight to timedelta: advance(minutes=16)
        self._now = self._now + timedelta(**kwargs)
        return self._now


def get_clock():
    clock = current_app.extensions.get("clock")
    if clock is None:
        clock = SystemClock()
        current_app.extensions["clock"] = clock
    return clock
