"""
Tests for the repeating task schedulers.
"""

import threading
import time

import pytest

from scheduler import ManualScheduler, ThreadingScheduler


def wait_for(condition, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(0.005)
    return condition()


class TestManualScheduler:

    def test_nothing_runs_before_advance(self, scheduler):
        calls = []
        scheduler.schedule_repeating(0.1, lambda: calls.append(scheduler.now()) or True)
        assert calls == []
        assert scheduler.pending == 1

    def test_ticks_see_their_own_time(self, scheduler):
        calls = []
        scheduler.schedule_repeating(0.1, lambda: calls.append(scheduler.now()) or True)

        runs = scheduler.advance(0.35)

        assert runs == 3
        assert calls == pytest.approx([0.1, 0.2, 0.3])
        assert scheduler.now() == pytest.approx(0.35)

    def test_callback_returning_false_stops(self, scheduler):
        calls = []

        def tick():
            calls.append(scheduler.now())
            return len(calls) < 2

        task = scheduler.schedule_repeating(0.1, tick)
        scheduler.advance(1.0)

        assert len(calls) == 2
        assert not task.active
        assert scheduler.pending == 0

    def test_cancel(self, scheduler):
        calls = []
        task = scheduler.schedule_repeating(0.1, lambda: calls.append(1) or True)
        scheduler.advance(0.15)
        task.cancel()
        task.cancel()
        scheduler.advance(1.0)
        assert calls == [1]
        assert not task.active

    def test_tasks_interleave_in_time_order(self, scheduler):
        order = []
        scheduler.schedule_repeating(0.3, lambda: order.append("slow") or True)
        scheduler.schedule_repeating(0.2, lambda: order.append("fast") or True)
        scheduler.advance(0.5)
        assert order == ["fast", "slow", "fast"]

    def test_run_until_idle(self, scheduler):
        calls = []

        def tick():
            calls.append(1)
            return len(calls) < 5

        scheduler.schedule_repeating(0.05, tick)
        runs = scheduler.run_until_idle()

        assert runs == 5
        assert scheduler.pending == 0
        assert scheduler.now() == pytest.approx(0.25)

    def test_run_until_idle_is_bounded(self, scheduler):
        scheduler.schedule_repeating(1.0, lambda: True)
        scheduler.run_until_idle(max_seconds=5.0)
        assert scheduler.pending == 1
        assert scheduler.now() == pytest.approx(5.0)

    def test_start_time(self):
        assert ManualScheduler(start_time=10.0).now() == 10.0

    def test_non_positive_interval_rejected(self, scheduler):
        with pytest.raises(ValueError):
            scheduler.schedule_repeating(0.0, lambda: True)


class TestThreadingScheduler:

    def test_runs_until_callback_stops(self):
        scheduler = ThreadingScheduler()
        calls = []

        def tick():
            calls.append(1)
            return len(calls) < 3

        task = scheduler.schedule_repeating(0.01, tick)

        assert wait_for(lambda: not task.active)
        assert len(calls) == 3

    def test_cancel_stops_ticks(self):
        scheduler = ThreadingScheduler()
        calls = []
        task = scheduler.schedule_repeating(0.01, lambda: calls.append(1) or True)

        assert wait_for(lambda: len(calls) >= 1)
        task.cancel()
        count = len(calls)
        time.sleep(0.05)

        assert not task.active
        assert len(calls) == count

    def test_failing_callback_stops_task(self):
        scheduler = ThreadingScheduler()

        def tick():
            raise RuntimeError("boom")

        task = scheduler.schedule_repeating(0.01, tick)
        assert wait_for(lambda: not task.active)

    def test_cancel_from_own_callback(self):
        scheduler = ThreadingScheduler()
        ready = threading.Event()
        done = threading.Event()
        holder = {}

        def tick():
            ready.wait(timeout=1.0)
            holder["task"].cancel()
            done.set()
            return True

        holder["task"] = scheduler.schedule_repeating(0.01, tick)
        ready.set()
        assert done.wait(timeout=2.0)
        assert wait_for(lambda: not holder["task"].active)

    def test_now_is_monotonic(self):
        scheduler = ThreadingScheduler()
        first = scheduler.now()
        assert scheduler.now() >= first
