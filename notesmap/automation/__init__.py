"""
Automation Module
=================

Clocks and timer queues that drive the debounced save and the expiry sweep.
"""

from notesmap.automation.clock import Clock, ManualClock, SystemClock
from notesmap.automation.scheduler import ManualTimerQueue, ScheduleTimerQueue, TimerHandle, TimerQueue

__all__ = [
    'Clock',
    'ManualClock',
    'SystemClock',
    'ManualTimerQueue',
    'ScheduleTimerQueue',
    'TimerHandle',
    'TimerQueue',
]
