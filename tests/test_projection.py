"""
Tests for coordinate projection and along-line helpers.
"""

import math

import pytest

from constants import PROJECTION_Y_LEGACY_MAX_CLAMP
from projection import (
    Coordinate,
    coordinate_along,
    haversine_distance,
    line_length,
    line_slice_along,
    planar_distance,
    planar_length,
    project_x,
    project_y,
)


class TestProjectX:

    def test_prime_meridian_is_center(self):
        assert project_x(0.0) == 0.5

    def test_antimeridian_edges(self):
        assert project_x(-180.0) == 0.0
        assert project_x(180.0) == 1.0


class TestProjectY:

    def test_equator_is_center(self):
        assert project_y(0.0) == pytest.approx(0.5)

    def test_north_is_smaller(self):
        """North projects toward the top of the unit square."""
        assert project_y(45.0) < 0.5 < project_y(-45.0)

    def test_symmetric_about_equator(self):
        assert project_y(30.0) - 0.5 == pytest.approx(0.5 - project_y(-30.0))

    def test_far_north_clamps_to_zero(self):
        assert project_y(89.0) == 0.0

    def test_pole_clamps_without_math_error(self):
        assert project_y(90.0) == 0.0
        assert project_y(-90.0) == 1.0

    def test_far_south_clamps_to_one(self):
        assert project_y(-89.0) == 1.0

    def test_legacy_overflow_clamp(self):
        """Older output clamped overflowing latitudes to 1.1."""
        assert project_y(-89.0, PROJECTION_Y_LEGACY_MAX_CLAMP) == 1.1

    def test_within_range_unclamped(self):
        assert 0.0 < project_y(-85.0) < 1.0


class TestPlanarDistance:

    def test_same_point_is_zero(self):
        p = Coordinate(37.7749, -122.4194)
        assert planar_distance(p, p) == 0.0

    def test_non_negative_and_symmetric(self):
        a = Coordinate(37.7749, -122.4194)
        b = Coordinate(40.7128, -74.0060)
        assert planar_distance(a, b) > 0.0
        assert planar_distance(a, b) == planar_distance(b, a)

    def test_longitude_delta_on_equator(self):
        a = Coordinate(0.0, 0.0)
        b = Coordinate(0.0, 36.0)
        assert planar_distance(a, b) == pytest.approx(0.1)

    def test_planar_length_sums_segments(self):
        coords = [Coordinate(0.0, 0.0), Coordinate(0.0, 36.0), Coordinate(0.0, 72.0)]
        assert planar_length(coords) == pytest.approx(0.2)

    def test_planar_length_of_single_point(self):
        assert planar_length([Coordinate(1.0, 1.0)]) == 0.0


class TestHaversine:

    def test_one_degree_on_equator(self):
        d = haversine_distance(Coordinate(0.0, 0.0), Coordinate(0.0, 1.0))
        assert d == pytest.approx(111195, rel=1e-3)

    def test_line_length(self):
        shape = [Coordinate(0.0, 0.0), Coordinate(0.0, 1.0), Coordinate(0.0, 2.0)]
        assert line_length(shape) == pytest.approx(2 * 111195, rel=1e-3)


@pytest.fixture
def shape():
    return [Coordinate(0.0, 0.0), Coordinate(0.0, 0.001), Coordinate(0.0, 0.002),
            Coordinate(0.0, 0.003)]


class TestCoordinateAlong:

    def test_start(self, shape):
        assert coordinate_along(shape, 0.0) == shape[0]

    def test_midpoint_of_segment(self, shape):
        half = haversine_distance(shape[0], shape[1]) / 2
        point = coordinate_along(shape, half)
        assert point.longitude == pytest.approx(0.0005)

    def test_past_end_is_last_vertex(self, shape):
        assert coordinate_along(shape, 1e9) == shape[-1]

    def test_empty_or_negative(self, shape):
        assert coordinate_along([], 10.0) is None
        assert coordinate_along(shape, -1.0) is None


class TestLineSliceAlong:

    def test_full_slice_keeps_all_vertices(self, shape):
        sliced = line_slice_along(shape, 0.0, line_length(shape))
        assert len(sliced) == len(shape)
        assert sliced[0] == shape[0]
        assert sliced[-1].longitude == pytest.approx(shape[-1].longitude)

    def test_slice_from_vertex(self, shape):
        """Starting exactly on a vertex does not repeat it."""
        start = line_length(shape[:3])
        sliced = line_slice_along(shape, start, line_length(shape))
        assert len(sliced) == 2
        assert sliced[0].longitude == pytest.approx(0.002)

    def test_slice_mid_segment(self, shape):
        seg = haversine_distance(shape[0], shape[1])
        sliced = line_slice_along(shape, seg * 1.5, line_length(shape))
        assert len(sliced) == 3
        assert sliced[0].longitude == pytest.approx(0.0015)
        assert sliced[1] == shape[2]

    def test_empty_range(self, shape):
        assert len(line_slice_along(shape, 100.0, 100.0)) == 1

    def test_start_past_end_is_last_vertex(self, shape):
        assert line_slice_along(shape, 1e6, 2e6) == [shape[-1]]

    def test_degenerate_shapes(self):
        assert line_slice_along([], 0.0, 10.0) == []
        single = [Coordinate(1.0, 1.0)]
        assert line_slice_along(single, 0.0, 10.0) == single
