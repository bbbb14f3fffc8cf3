"""
Timer Queue
===========

Cooperative timers for the notes canvas: the debounced save (one-shot,
re-armed on every change) and the expiry sweep (periodic while the editor is
mounted).

Two implementations share one interface:

- ScheduleTimerQueue: real time, backed by a private `schedule.Scheduler`.
  The host calls run_pending() from its loop, or run_forever().
- ManualTimerQueue: virtual time on a ManualClock. advance(seconds) fires
  every task that falls due, in order. Used by the tests.

Usage:
    timers = ScheduleTimerQueue()
    handle = timers.call_later(0.12, save)
    handle.cancel()
    timers.call_every(15, sweep)
"""

import heapq
import itertools
import logging
import threading
import time
from typing import Callable, List, Optional, Tuple

import schedule

from notesmap.automation.clock import ManualClock

logger = logging.getLogger(__name__)

Callback = Callable[[], None]


class TimerHandle:
    """Cancel handle returned by every scheduling call."""

    def __init__(self, on_cancel: Optional[Callback] = None):
        self._on_cancel = on_cancel
        self.cancelled = False

    def cancel(self) -> None:
        if self.cancelled:
            return
        self.cancelled = True
        if self._on_cancel is not None:
            self._on_cancel()


class TimerQueue:
    """Scheduling port used by the persistence layer."""

    def call_later(self, delay_s: float, callback: Callback) -> TimerHandle:
        raise NotImplementedError

    def call_every(self, interval_s: float, callback: Callback) -> TimerHandle:
        raise NotImplementedError

    def run_pending(self) -> None:
        raise NotImplementedError


# ============================================================
# REAL TIME (schedule)
# ============================================================

class ScheduleTimerQueue(TimerQueue):
    """Timer queue on a dedicated schedule.Scheduler (not the module default)."""

    def __init__(self, scheduler: Optional[schedule.Scheduler] = None):
        self.scheduler = scheduler or schedule.Scheduler()

    def call_later(self, delay_s: float, callback: Callback) -> TimerHandle:
        handle = TimerHandle()

        def fire_once():
            if not handle.cancelled:
                handle.cancelled = True
                callback()
            return schedule.CancelJob

        job = self.scheduler.every(delay_s).seconds.do(fire_once)
        handle._on_cancel = lambda: self.scheduler.cancel_job(job)
        return handle

    def call_every(self, interval_s: float, callback: Callback) -> TimerHandle:
        job = self.scheduler.every(interval_s).seconds.do(callback)
        return TimerHandle(on_cancel=lambda: self.scheduler.cancel_job(job))

    def run_pending(self) -> None:
        self.scheduler.run_pending()

    @property
    def pending_count(self) -> int:
        return len(self.scheduler.jobs)

    def run_forever(self, poll_s: float = 0.05, stop: Optional[threading.Event] = None) -> None:
        """Drive the queue until stop is set (or forever)."""
        logger.info("Timer loop started (poll=%.2fs)", poll_s)
        while stop is None or not stop.is_set():
            self.run_pending()
            time.sleep(poll_s)
        logger.info("Timer loop stopped")


# ============================================================
# VIRTUAL TIME
# ============================================================

class _Task:
    __slots__ = ("callback", "interval_ms", "handle")

    def __init__(self, callback: Callback, interval_ms: Optional[int], handle: TimerHandle):
        self.callback = callback
        self.interval_ms = interval_ms
        self.handle = handle


class ManualTimerQueue(TimerQueue):
    """Deterministic timer queue driven by a ManualClock."""

    def __init__(self, clock: Optional[ManualClock] = None):
        self.clock = clock or ManualClock()
        self._heap: List[Tuple[int, int, _Task]] = []
        self._seq = itertools.count()

    def _push(self, due_ms: int, task: _Task) -> None:
        heapq.heappush(self._heap, (due_ms, next(self._seq), task))

    def call_later(self, delay_s: float, callback: Callback) -> TimerHandle:
        handle = TimerHandle()
        self._push(self.clock.now_ms() + int(round(delay_s * 1000)), _Task(callback, None, handle))
        return handle

    def call_every(self, interval_s: float, callback: Callback) -> TimerHandle:
        interval_ms = max(1, int(round(interval_s * 1000)))
        handle = TimerHandle()
        self._push(self.clock.now_ms() + interval_ms, _Task(callback, interval_ms, handle))
        return handle

    @property
    def pending_count(self) -> int:
        return sum(1 for _, _, task in self._heap if not task.handle.cancelled)

    def _run_until(self, target_ms: int) -> None:
        while self._heap and self._heap[0][0] <= target_ms:
            due_ms, _, task = heapq.heappop(self._heap)
            if task.handle.cancelled:
                continue
            if due_ms > self.clock.now_ms():
                self.clock.set(due_ms)
            if task.interval_ms is None:
                task.handle.cancelled = True
            else:
                self._push(due_ms + task.interval_ms, task)
            task.callback()

    def run_pending(self) -> None:
        self._run_until(self.clock.now_ms())

    def advance(self, seconds: float) -> None:
        """Move virtual time forward, firing due tasks along the way."""
        target_ms = self.clock.now_ms() + int(round(seconds * 1000))
        self._run_until(target_ms)
        if self.clock.now_ms() < target_ms:
            self.clock.set(target_ms)
