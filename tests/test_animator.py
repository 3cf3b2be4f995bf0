"""
Tests for the route line gradient animator.
"""

import pytest

from animator import GradientAnimator
from progress import RouteLineState, TraveledState


@pytest.fixture
def animator(sink, scheduler, line_config):
    return GradientAnimator(sink, scheduler, line_config)


@pytest.fixture
def state(two_leg_route):
    return RouteLineState(route=two_leg_route)


def last_position(stops):
    return stops.positions()[-1]


class TestPush:

    def test_updates_both_layers(self, animator, state, sink, palette):
        animator.push(state, 0.5)

        main = sink.get("primary.main")
        casing = sink.get("primary.casing")
        assert main.positions() == pytest.approx([0.0, 0.499999999, 0.5])
        assert casing == main
        assert main[0.5] == palette.casing

    def test_main_line_uses_congestion(self, animator, state, sink, palette, congestion_segments):
        state.route = state.route.model_copy(update={"congestion": congestion_segments})
        animator.push(state, 0.0)

        assert sink.get("primary.main")[0.0] == palette.traffic_low
        assert sink.get("primary.casing") == {0.0: palette.casing}

    def test_without_route(self, animator, sink):
        animator.push(RouteLineState(), 0.5)
        assert len(sink) == 0


class TestUpdateRoute:

    def test_unchanged_fraction_schedules_nothing(self, animator, state, scheduler):
        state.traveled = TraveledState(current_fraction=0.4, previous_fraction=0.4)
        assert animator.update_route(state) is None
        assert scheduler.pending == 0

    def test_interpolates_over_duration(self, animator, state, scheduler, sink):
        state.traveled = TraveledState(current_fraction=0.6, previous_fraction=0.2)
        task = animator.update_route(state)
        assert task is not None and task.active
        assert state.animation is task

        scheduler.advance(0.52)
        assert last_position(sink.get("primary.main")) == pytest.approx(0.4, abs=1e-6)

        scheduler.run_until_idle()
        assert last_position(sink.get("primary.main")) == pytest.approx(0.6, abs=1e-6)
        assert last_position(sink.get("primary.casing")) == pytest.approx(0.6, abs=1e-6)
        assert not task.active

    def test_first_tick_after_one_interval(self, animator, state, scheduler, sink):
        state.traveled = TraveledState(current_fraction=0.6, previous_fraction=0.2)
        animator.update_route(state)

        scheduler.advance(0.04)
        assert "primary.main" not in sink

        scheduler.advance(0.02)
        assert sink.update_count("primary.main") == 1

    def test_tick_count_follows_interval(self, animator, state, scheduler, sink):
        state.traveled = TraveledState(current_fraction=0.6, previous_fraction=0.2)
        animator.update_route(state)
        scheduler.run_until_idle()
        # 50ms ticks over one second
        assert 20 <= sink.update_count("primary.main") <= 21

    def test_new_update_cancels_outstanding_animation(self, animator, state, scheduler):
        state.traveled = TraveledState(current_fraction=0.3, previous_fraction=0.1)
        first = animator.update_route(state)
        scheduler.advance(0.2)

        state.traveled.advance(0.5)
        second = animator.update_route(state)

        assert not first.active
        assert second.active
        assert scheduler.pending == 1

    def test_uses_values_captured_at_start(self, animator, state, scheduler, sink):
        state.traveled = TraveledState(current_fraction=0.6, previous_fraction=0.2)
        animator.update_route(state)
        state.traveled.reset()

        scheduler.run_until_idle()
        assert last_position(sink.get("primary.main")) == pytest.approx(0.6, abs=1e-6)

    def test_fully_traveled_removes_layers(self, animator, state, scheduler, sink):
        animator.push(state, 0.9)
        state.traveled = TraveledState(current_fraction=1.0, previous_fraction=0.9)

        assert animator.update_route(state) is None

        assert "primary.main" not in sink
        assert "primary.casing" not in sink
        assert sink.removed == ["primary.main", "primary.casing"]
        assert state.traveled == TraveledState()
        assert scheduler.pending == 0

    def test_fully_traveled_cancels_running_animation(self, animator, state, scheduler):
        state.traveled = TraveledState(current_fraction=0.8, previous_fraction=0.5)
        running = animator.update_route(state)

        state.traveled.advance(1.0)
        animator.update_route(state)

        assert not running.active
        assert state.animation is None

    def test_without_route(self, animator):
        state = RouteLineState(traveled=TraveledState(current_fraction=0.5))
        assert animator.update_route(state) is None
