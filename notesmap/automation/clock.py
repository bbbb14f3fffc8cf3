"""
Injectable clocks.

All timestamps in the notes canvas are integer milliseconds since the epoch.
Production code reads SystemClock; tests drive a ManualClock forward.
"""

import time


class Clock:
    """Source of the current time in epoch milliseconds."""

    def now_ms(self) -> int:
        raise NotImplementedError


class SystemClock(Clock):

    def now_ms(self) -> int:
        return int(time.time() * 1000)


class ManualClock(Clock):
    """Virtual clock that only moves when told to."""

    def __init__(self, start_ms: int = 0):
        self._now = int(start_ms)

    def now_ms(self) -> int:
        return self._now

    def set(self, now_ms: int) -> None:
        if now_ms < self._now:
            raise ValueError("ManualClock cannot move backwards")
        self._now = int(now_ms)

    def advance(self, ms: int) -> int:
        self.set(self._now + int(ms))
        return self._now

    def __repr__(self) -> str:
        return f"ManualClock(now_ms={self._now})"
