"""
Route point flattening, granular distance indexing and upcoming point lookup.

The route is flattened once per route change into a nested legs -> steps ->
coordinates list and a single flat list. A distance table holding the planar
distance remaining from every flat point to the route's end is built from
the flat list in one pass. On every progress update the located index into
that table anchors the traveled fraction.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np

from constants import PROJECTION_Y_MAX_CLAMP
from projection import Coordinate, line_slice_along, project_x, project_y
from route_data.data_models import ProgressSnapshot, Route

logger = logging.getLogger(__name__)


class ProgressIndexError(IndexError):
    """Progress snapshot references geometry the stored route does not have."""


@dataclass(frozen=True)
class FlatRoutePoints:
    """Route coordinates nested by leg and step, plus one flat list.

    The last point of a step and the first point of the next one are kept
    twice in ``flat_list``.
    """
    nested_list: List[List[List[Coordinate]]] = field(default_factory=list)
    flat_list: List[Coordinate] = field(default_factory=list)

    def step_points(self, leg_index: int, step_index: int) -> List[Coordinate]:
        return self.nested_list[leg_index][step_index]


@dataclass(frozen=True)
class DistanceEntry:
    """A flat route point and the planar distance left to the route's end."""
    point: Coordinate
    distance_remaining: float


class DistanceTable:
    """
    Remaining planar distance for every flat route point.

    ``distance_remaining`` is non-increasing with the index and ends at
    exactly 0. Read-only once built.
    """

    def __init__(self, points: Sequence[Coordinate], distance_remaining: np.ndarray):
        if len(points) != len(distance_remaining):
            raise ValueError("Points and distances must be index-aligned")
        self._points = list(points)
        self._distance_remaining = distance_remaining
        self._distance_remaining.setflags(write=False)

    @property
    def total_distance(self) -> float:
        """Planar length of the whole route."""
        return float(self._distance_remaining[0])

    @property
    def distance_remaining(self) -> np.ndarray:
        return self._distance_remaining

    def __len__(self) -> int:
        return len(self._points)

    def __getitem__(self, index: int) -> DistanceEntry:
        return DistanceEntry(self._points[index], float(self._distance_remaining[index]))

    def __iter__(self):
        for i in range(len(self)):
            yield self[i]


def flatten_route(route: Optional[Route]) -> FlatRoutePoints:
    """Transform the route into legs -> steps -> coordinates plus a flat list.

    Steps without a shape contribute an empty list. A missing route or one
    without legs yields an empty result.
    """
    if route is None:
        return FlatRoutePoints()

    nested = [[step.coordinates for step in leg.steps] for leg in route.legs]
    flat = [coord for leg in nested for step in leg for coord in step]
    return FlatRoutePoints(nested_list=nested, flat_list=flat)


def build_distance_table(coordinates: Sequence[Coordinate],
                         overflow_clamp: float = PROJECTION_Y_MAX_CLAMP) -> Optional[DistanceTable]:
    """
    Precompute the planar distance remaining from every point to the last one.

    Equivalent to walking from the last index down to 1, accumulating
    ``planar_distance(point[i], point[i - 1])`` and storing the running total
    at ``i - 1``, with the last index at 0.

    Returns:
        DistanceTable, or None for an empty coordinate list
    """
    if not coordinates:
        return None

    xs = np.fromiter((project_x(c.longitude) for c in coordinates), dtype=np.float64,
                     count=len(coordinates))
    ys = np.fromiter((project_y(c.latitude, overflow_clamp) for c in coordinates),
                     dtype=np.float64, count=len(coordinates))
    segments = np.hypot(np.diff(xs), np.diff(ys))

    remaining = np.zeros(len(coordinates), dtype=np.float64)
    # Reverse cumulative sum: remaining[i] = sum(segments[i:])
    remaining[:-1] = np.cumsum(segments[::-1])[::-1]

    return DistanceTable(coordinates, remaining)


def sliced_point_count(shape: Sequence[Coordinate], start: float, stop: float) -> int:
    """Number of points left in a step shape between two along-distances.

    Counts the points of the sliced line minus one; a step without a usable
    shape counts 0. A negative start counts from the beginning of the step.
    """
    if not shape:
        return 0
    return max(len(line_slice_along(shape, max(start, 0.0), stop)) - 1, 0)


def locate_upcoming_index(route_points: FlatRoutePoints, snapshot: ProgressSnapshot,
                          step_shape: Optional[Sequence[Coordinate]] = None) -> int:
    """
    Find the distance table index anchoring the user's progress.

    Counts every flat point still ahead of the user (rest of the current
    step, later steps of the current leg, all later legs) and subtracts it
    from the total point count.

    Args:
        route_points: Flattened route that built the distance table
        snapshot: Current navigation progress
        step_shape: Shape of the current step, defaults to the stored one

    Returns:
        Index into the distance table

    Raises:
        ProgressIndexError: Leg or step index is out of range for the stored
            route, or the resulting index falls outside the table
    """
    nested = route_points.nested_list
    leg_index, step_index = snapshot.leg_index, snapshot.step_index

    if leg_index >= len(nested):
        raise ProgressIndexError(f"Leg index {leg_index} out of range ({len(nested)} legs)")
    current_leg = nested[leg_index]
    if step_index >= len(current_leg):
        raise ProgressIndexError(
            f"Step index {step_index} out of range ({len(current_leg)} steps in leg {leg_index})"
        )

    if step_shape is None:
        step_shape = current_leg[step_index]

    remaining_points = sliced_point_count(step_shape, snapshot.distance_traveled,
                                          snapshot.step_distance)
    remaining_points += sum(len(step) for step in current_leg[step_index + 1:])
    remaining_points += sum(len(step) for leg in nested[leg_index + 1:] for step in leg)

    index = len(route_points.flat_list) - remaining_points - 1
    if not 0 <= index < len(route_points.flat_list):
        raise ProgressIndexError(
            f"Upcoming point index {index} outside route of {len(route_points.flat_list)} points"
        )
    return index
