"""
Coordinate projection and distance helpers for route geometry.

Two distance notions live here:

- ``planar_distance``: Euclidean distance between coordinates projected onto
  a Web-Mercator-like unit square. It is not a ground distance, only a fast
  relative metric for proportional comparisons within a single route. All
  traveled-fraction math uses it.
- ``haversine_distance``: great-circle distance in meters. Step distances
  reported by the navigation engine are in meters, so slicing a step shape
  by along-distance uses this one.
"""

import math
from typing import List, NamedTuple, Optional, Sequence, Tuple

from constants import (
    EARTH_RADIUS_METERS,
    PROJECTION_Y_MAX_CLAMP,
    PROJECTION_Y_MIN,
)


class Coordinate(NamedTuple):
    """Geodetic coordinate in degrees."""
    latitude: float
    longitude: float


def project_x(longitude: float) -> float:
    """Project a longitude onto the unit square's horizontal axis."""
    return longitude / 360.0 + 0.5


def project_y(latitude: float, overflow_clamp: float = PROJECTION_Y_MAX_CLAMP) -> float:
    """Project a latitude onto the unit square's vertical axis.

    Values below 0 clamp to 0 and values above 1 clamp to ``overflow_clamp``.

    Args:
        latitude: Latitude in degrees
        overflow_clamp: Value returned for projections past the bottom edge
            (1.0 by default, 1.1 reproduces older rendered output)
    """
    sin_value = math.sin(latitude * math.pi / 180.0)
    if sin_value >= 1.0:
        return PROJECTION_Y_MIN
    if sin_value <= -1.0:
        return overflow_clamp

    y = 0.5 - 0.25 * math.log((1.0 + sin_value) / (1.0 - sin_value)) / math.pi
    if y < 0.0:
        return PROJECTION_Y_MIN
    if y > 1.0:
        return overflow_clamp
    return y


def project(coord: Coordinate, overflow_clamp: float = PROJECTION_Y_MAX_CLAMP) -> Tuple[float, float]:
    """Project a coordinate to (x, y) on the unit square."""
    return project_x(coord.longitude), project_y(coord.latitude, overflow_clamp)


def planar_distance(a: Coordinate, b: Coordinate,
                    overflow_clamp: float = PROJECTION_Y_MAX_CLAMP) -> float:
    """Euclidean distance between two coordinates on the projected unit square."""
    dx = project_x(a.longitude) - project_x(b.longitude)
    dy = project_y(a.latitude, overflow_clamp) - project_y(b.latitude, overflow_clamp)
    return math.sqrt(dx * dx + dy * dy)


def planar_length(coords: Sequence[Coordinate],
                  overflow_clamp: float = PROJECTION_Y_MAX_CLAMP) -> float:
    """Sum of planar distances between consecutive coordinates."""
    return sum(
        planar_distance(coords[i], coords[i + 1], overflow_clamp)
        for i in range(len(coords) - 1)
    )


# =============================================================================
# Geodesic along-line helpers
# =============================================================================

def haversine_distance(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance between two coordinates in meters."""
    lat1, lat2 = math.radians(a.latitude), math.radians(b.latitude)
    dlat = lat2 - lat1
    dlon = math.radians(b.longitude - a.longitude)

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_METERS * math.asin(min(1.0, math.sqrt(h)))


def line_length(shape: Sequence[Coordinate]) -> float:
    """Total haversine length of a polyline in meters."""
    return sum(haversine_distance(shape[i], shape[i + 1]) for i in range(len(shape) - 1))


def _interpolate(a: Coordinate, b: Coordinate, t: float) -> Coordinate:
    # Linear in degrees; segments of a step shape are short enough for this
    return Coordinate(
        a.latitude + (b.latitude - a.latitude) * t,
        a.longitude + (b.longitude - a.longitude) * t,
    )


def _locate_along(shape: Sequence[Coordinate], distance: float,
                  inclusive_end: bool) -> Tuple[int, Coordinate]:
    """Find the segment containing ``distance`` and the point on it.

    With ``inclusive_end`` a distance landing exactly on a vertex resolves to
    the end of the preceding segment, otherwise to the start of the next one.
    Distances past the end resolve to the last vertex.
    """
    traveled = 0.0
    last_segment = len(shape) - 2
    for i in range(len(shape) - 1):
        seg = haversine_distance(shape[i], shape[i + 1])
        reached = traveled + seg >= distance if inclusive_end else traveled + seg > distance
        if reached:
            t = (distance - traveled) / seg if seg > 0 else 0.0
            return i, _interpolate(shape[i], shape[i + 1], max(0.0, min(1.0, t)))
        traveled += seg
    return last_segment, shape[-1]


def coordinate_along(shape: Sequence[Coordinate], distance: float) -> Optional[Coordinate]:
    """Coordinate at ``distance`` meters from the start of a polyline.

    Returns None for an empty shape or a negative distance.
    """
    if not shape or distance < 0:
        return None
    if len(shape) == 1:
        return shape[0]
    return _locate_along(shape, distance, inclusive_end=False)[1]


def line_slice_along(shape: Sequence[Coordinate], start: float, stop: float) -> List[Coordinate]:
    """Slice a polyline between two along-distances in meters.

    The slice is the point at ``start``, every vertex strictly between the
    two distances, and the point at ``stop``. Degenerate inputs (fewer than
    two vertices, negative start, empty range) yield at most one point, and
    a start at or past the end of the line yields only the last vertex.
    """
    start_point = coordinate_along(shape, start)
    if start_point is None:
        return []
    if len(shape) < 2 or stop <= start:
        return [start_point]
    if start >= line_length(shape):
        return [shape[-1]]

    start_index, _ = _locate_along(shape, start, inclusive_end=False)
    stop_index, stop_point = _locate_along(shape, stop, inclusive_end=True)

    return [start_point] + list(shape[start_index + 1:stop_index + 1]) + [stop_point]
