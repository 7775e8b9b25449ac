"""
Clock capability.

The kernels never read time themselves; the engine asks a `Clock` once per
operation and passes the reading down as a plain int.
"""

from __future__ import annotations

import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    def now(self) -> int: ...


class SystemClock:
    """Wall-clock seconds (integer)."""

    def now(self) -> int:
        return int(time.time())


class ManualClock:
    """Monotonic clock driven by the caller (tests, simulations, replays)."""

    def __init__(self, start: int = 0) -> None:
        if start < 0:
            raise ValueError(f"start must be non-negative: {start}")
        self._now = start

    def now(self) -> int:
        return self._now

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise ValueError(f"Clock cannot move backwards: advance({seconds})")
        self._now += seconds
        return self._now

    def set(self, timestamp: int) -> None:
        if timestamp < self._now:
            raise ValueError(f"Clock cannot move backwards: {timestamp} < {self._now}")
        self._now = timestamp
