from datetime import datetime

from utils.clock import FrozenClock, SystemClock, get_clock


def test_frozen_clock_only_moves_when_advanced():
    clock = FrozenClock(datetime(2026, 1, 1, 8, 0))

    assert clock.now() == datetime(2026, 1, 1, 8, 0)
    assert clock.advance(minutes=16) == datetime(2026, 1, 1, 8, 16)
    clock.set(datetime(2025, 12, 31))
    assert clock.now() == datetime(2025, 12, 31)


def test_system_clock_is_naive_utc():
    assert SystemClock().now().tzinfo is None


def test_app_exposes_injected_clock(app, clock):
    assert get_clock() is clock
