"""
Tests for traveled fraction tracking.
"""

import pytest

from conftest import C, E
from progress import RouteLineState, TraveledState, update_traveled_fraction
from projection import Coordinate
from route_points import build_distance_table, flatten_route
from scheduler import ManualScheduler


@pytest.fixture
def table(two_leg_route):
    return build_distance_table(flatten_route(two_leg_route).flat_list)


class TestTraveledState:

    def test_advance_shifts_current_into_previous(self):
        state = TraveledState()
        state.advance(0.25)
        state.advance(0.5)
        assert state.previous_fraction == 0.25
        assert state.current_fraction == 0.5
        assert state.delta == pytest.approx(0.25)

    def test_reset(self):
        state = TraveledState(current_fraction=0.7, previous_fraction=0.6)
        state.reset()
        assert state.current_fraction == 0.0
        assert state.previous_fraction == 0.0


class TestUpdateTraveledFraction:

    def test_halfway(self, table):
        state = TraveledState()
        assert update_traveled_fraction(state, table, 3, C)
        assert state.current_fraction == pytest.approx(0.5)
        assert state.previous_fraction == 0.0

    def test_between_points(self, table):
        """The live position extends the upcoming point's remaining distance."""
        state = TraveledState()
        behind = Coordinate(0.0, 0.0015)
        assert update_traveled_fraction(state, table, 3, behind)
        assert state.current_fraction == pytest.approx(0.375)

    def test_route_end(self, table):
        state = TraveledState()
        assert update_traveled_fraction(state, table, 5, E)
        assert state.current_fraction == pytest.approx(1.0)

    def test_successive_updates_keep_previous(self, table):
        state = TraveledState()
        update_traveled_fraction(state, table, 3, C)
        update_traveled_fraction(state, table, 5, E)
        assert state.previous_fraction == pytest.approx(0.5)
        assert state.current_fraction == pytest.approx(1.0)

    def test_far_off_route_is_noise(self, table):
        state = TraveledState(current_fraction=0.2, previous_fraction=0.1)
        assert not update_traveled_fraction(state, table, 3, Coordinate(1.0, 0.0))
        assert state.current_fraction == 0.2
        assert state.previous_fraction == 0.1

    def test_zero_length_route_is_noise(self):
        table = build_distance_table([C, C])
        state = TraveledState()
        assert not update_traveled_fraction(state, table, 0, C)
        assert state.current_fraction == 0.0

    def test_fraction_stays_in_unit_range(self, table):
        for index in range(len(table)):
            state = TraveledState()
            if update_traveled_fraction(state, table, index, table[index].point):
                assert 0.0 <= state.current_fraction <= 1.0


class TestRouteLineState:

    def test_cancel_animation(self):
        scheduler = ManualScheduler()
        state = RouteLineState()
        task = scheduler.schedule_repeating(0.1, lambda: True)
        state.animation = task

        state.cancel_animation()

        assert not task.active
        assert state.animation is None

    def test_cancel_without_animation(self):
        state = RouteLineState()
        state.cancel_animation()
        assert state.animation is None
