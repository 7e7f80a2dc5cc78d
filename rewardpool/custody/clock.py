"""
Time sources for reward pools.

Pools read time through a :class:`Clock` so that accrual can be replayed
deterministically in tests and simulations.
"""

from __future__ import annotations

import time
from typing import Protocol

from ..errors import PreconditionViolation


class Clock(Protocol):
    """Monotonic, non-decreasing wall-clock in whole seconds."""

    def now(self) -> int:
        ...


class SystemClock:
    """Wall-clock backed by ``time.time()``; never goes backwards."""

    def __init__(self):
        self._last = 0

    def now(self) -> int:
        current = int(time.time())
        # Guard against NTP steps moving the clock backwards
        self._last = max(self._last, current)
        return self._last


class ManualClock:
    """
    Clock advanced explicitly by the caller.

    Usage:
        clock = ManualClock(start=1_700_000_000)
        clock.advance(3600)
        clock.set(clock.now() + 86400)
    """

    def __init__(self, start: int = 0):
        if start < 0:
            raise PreconditionViolation(f"start must be non-negative, got {start}")
        self._now = start

    def now(self) -> int:
        return self._now

    def advance(self, seconds: int) -> int:
        if seconds < 0:
            raise PreconditionViolation(f"cannot move clock backwards by {seconds}s")
        self._now += seconds
        return self._now

    def set(self, timestamp: int) -> int:
        if timestamp < self._now:
            raise PreconditionViolation(
                f"cannot move clock backwards: {timestamp} < {self._now}"
            )
        self._now = timestamp
        return self._now


__all__ = ["Clock", "SystemClock", "ManualClock"]
