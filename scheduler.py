"""
Cancellable repeating tasks for route line animation.

A scheduler runs a callback at a fixed interval until the callback returns
False or the returned task is cancelled. Two implementations:

- ThreadingScheduler: one daemon thread per task, woken by a threading.Event.
- ManualScheduler: virtual clock advanced by the caller, for deterministic
  replays and tests.
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

# Returns True to keep running
TaskCallback = Callable[[], bool]


class ScheduledTask(ABC):
    """Handle to a repeating task."""

    @abstractmethod
    def cancel(self) -> None:
        """Stop the task. Safe to call more than once."""
        pass

    @property
    @abstractmethod
    def active(self) -> bool:
        """True until the task is cancelled or finishes."""
        pass


class Scheduler(ABC):
    """Source of repeating tasks and of the clock they are measured against."""

    @abstractmethod
    def schedule_repeating(self, interval_s: float, callback: TaskCallback) -> ScheduledTask:
        """
        Run ``callback`` every ``interval_s`` seconds.

        The first call happens one interval after scheduling.
        """
        pass

    @abstractmethod
    def now(self) -> float:
        """Current time in seconds on this scheduler's clock."""
        pass


class _ThreadTask(ScheduledTask):

    def __init__(self, interval_s: float, callback: TaskCallback):
        self._interval_s = interval_s
        self._callback = callback
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run_loop, daemon=True)

    def start(self) -> "_ThreadTask":
        self._thread.start()
        return self

    def _run_loop(self) -> None:
        while not self._stop.wait(timeout=self._interval_s):
            try:
                keep_running = self._callback()
            except Exception:
                logger.exception("Scheduled task failed, stopping it")
                keep_running = False
            if not keep_running:
                self._stop.set()

    def cancel(self) -> None:
        self._stop.set()
        if self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join(timeout=2.0)

    @property
    def active(self) -> bool:
        return not self._stop.is_set()


class ThreadingScheduler(Scheduler):
    """Runs each task on its own daemon thread."""

    def schedule_repeating(self, interval_s: float, callback: TaskCallback) -> ScheduledTask:
        return _ThreadTask(interval_s, callback).start()

    def now(self) -> float:
        return time.monotonic()


class _ManualTask(ScheduledTask):

    def __init__(self, interval_s: float, callback: TaskCallback, next_run: float):
        self.interval_s = interval_s
        self.callback = callback
        self.next_run = next_run
        self._active = True

    def cancel(self) -> None:
        self._active = False

    @property
    def active(self) -> bool:
        return self._active


class ManualScheduler(Scheduler):
    """
    Scheduler driven by an explicit virtual clock.

    Nothing runs until ``advance`` moves the clock; due tasks then run in
    time order, each tick seeing ``now()`` at its own scheduled time.
    """

    def __init__(self, start_time: float = 0.0):
        self._now = start_time
        self._tasks: List[_ManualTask] = []

    def schedule_repeating(self, interval_s: float, callback: TaskCallback) -> ScheduledTask:
        if interval_s <= 0:
            raise ValueError("Interval must be positive")
        task = _ManualTask(interval_s, callback, self._now + interval_s)
        self._tasks.append(task)
        return task

    def now(self) -> float:
        return self._now

    @property
    def pending(self) -> int:
        """Number of tasks still active."""
        return sum(1 for task in self._tasks if task.active)

    def _next_due(self, until: float) -> Optional[_ManualTask]:
        due = [t for t in self._tasks if t.active and t.next_run <= until]
        return min(due, key=lambda t: t.next_run) if due else None

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward, running every tick that falls due.

        Returns:
            Number of callback invocations
        """
        return self._run_until(self._now + seconds)

    def _run_until(self, until: float) -> int:
        runs = 0
        task = self._next_due(until)
        while task is not None:
            self._now = task.next_run
            task.next_run += task.interval_s
            runs += 1
            if not task.callback():
                task.cancel()
            task = self._next_due(until)

        self._now = until
        self._tasks = [t for t in self._tasks if t.active]
        return runs

    def run_until_idle(self, max_seconds: float = 60.0) -> int:
        """Advance until no task is active, bounded by ``max_seconds``."""
        runs = 0
        deadline = self._now + max_seconds
        while self.pending and self._now < deadline:
            task = min((t for t in self._tasks if t.active), key=lambda t: t.next_run)
            runs += self._run_until(min(max(task.next_run, self._now), deadline))
        return runs
