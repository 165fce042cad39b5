"""Tests for the injectable clocks."""

from datetime import datetime, timedelta, timezone

from patient_billing.domain.clock import DeterministicClock, SystemClock


def test_system_clock_is_aware_utc():
    now = SystemClock().now_utc()
    assert now.tzinfo is not None
    assert now.utcoffset() == timedelta(0)


def test_deterministic_clock_is_stable_until_advanced():
    start = datetime(2026, 1, 15, 9, 0, tzinfo=timezone.utc)
    clock = DeterministicClock(start)
    assert clock.now_utc() == clock.now_utc() == start

    assert clock.tick() == start + timedelta(seconds=1)
    clock.advance(59)
    assert clock.now_utc() == start + timedelta(minutes=1)


def test_deterministic_clock_normalises_to_utc():
    naive = DeterministicClock(datetime(2026, 1, 15, 9, 0))
    assert naive.now_utc().tzinfo == timezone.utc

    clock = DeterministicClock()
    clock.set_time(datetime(2026, 1, 15, 11, 0, tzinfo=timezone(timedelta(hours=2))))
    assert clock.now_utc() == datetime(2026, 1, 15, 9, 0, tzinfo=timezone.utc)
