"""Tests for the clock abstraction."""

from datetime import datetime, timedelta, timezone

from inventory_kernel.domain.clock import DeterministicClock, SystemClock


def test_system_clock_is_utc():
    assert SystemClock().now().tzinfo is not None
    assert SystemClock().now().utcoffset() == timedelta(0)


def test_deterministic_clock_is_stable_until_advanced():
    clock = DeterministicClock()
    assert clock.now() == clock.now() == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    clock.advance(30)
    assert clock.now() == datetime(2024, 1, 1, 12, 0, 30, tzinfo=timezone.utc)


def test_tick_returns_new_time():
    clock = DeterministicClock()
    first = clock.now()
    assert clock.tick() == first + timedelta(seconds=1)


def test_set_time():
    clock = DeterministicClock()
    moment = datetime(2025, 6, 30, 23, 59, tzinfo=timezone.utc)
    clock.set_time(moment)
    assert clock.now() == moment
