from __future__ import annotations

import pytest

from zenostake.integration import AccessControl, Clock, ManualClock, SingleOwner, SystemClock


def test_manual_clock_advances() -> None:
    clock = ManualClock(start=5)
    assert clock.now() == 5
    assert clock.advance(10) == 15
    clock.set(20)
    assert clock.now() == 20


def test_manual_clock_never_goes_backwards() -> None:
    clock = ManualClock(start=100)
    with pytest.raises(ValueError):
        clock.advance(-1)
    with pytest.raises(ValueError):
        clock.set(99)
    assert clock.now() == 100


def test_system_clock_is_integer_seconds() -> None:
    clock = SystemClock()
    assert isinstance(clock, Clock)
    now = clock.now()
    assert isinstance(now, int)
    assert now > 1_600_000_000


def test_single_owner() -> None:
    access = SingleOwner("owner")
    assert isinstance(access, AccessControl)
    assert access.is_owner("owner")
    assert not access.is_owner("mallory")


def test_single_owner_requires_address() -> None:
    with pytest.raises(ValueError):
        SingleOwner("")
