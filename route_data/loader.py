"""
Loaders for route geometry and progress traces.

Routes come in the Directions response shape: ``routes[0].legs[].steps[]``
whose ``geometry`` is either a GeoJSON LineString (``[longitude, latitude]``
pairs) or an encoded polyline at precision 6, plus an optional per-leg
``annotation.congestion`` list holding one level per segment of the leg
geometry.

Progress traces are a JSON list (or ``{"updates": [...]}``) of snapshot
objects whose ``coordinate`` is ``[latitude, longitude]``.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import polyline
from pydantic import TypeAdapter

from constants import CONGESTION_LEVELS, CONGESTION_UNKNOWN, PROJECTION_Y_MAX_CLAMP
from projection import Coordinate
from route_data.data_models import (
    CongestionSegment,
    ProgressSnapshot,
    Route,
    RouteLeg,
    RouteStep,
)

logger = logging.getLogger(__name__)

_SNAPSHOT_LIST = TypeAdapter(List[ProgressSnapshot])

# Directions responses encode geometries with 6 decimal places
POLYLINE_PRECISION = 6


def _read_json(path: Union[str, Path]) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as handle:
            return json.load(handle)
    except FileNotFoundError as exc:
        raise ValueError(f"File not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc


def _step_coordinates(geometry: Any) -> Optional[List[Coordinate]]:
    """Convert a step geometry into (latitude, longitude) coordinates.

    Accepts a GeoJSON LineString mapping or an encoded polyline string.
    """
    if not geometry:
        return None
    if isinstance(geometry, str):
        try:
            decoded = polyline.decode(geometry, POLYLINE_PRECISION)
        except (IndexError, TypeError, ValueError) as exc:
            raise ValueError(f"Invalid encoded polyline geometry: {exc}") from exc
        return [Coordinate(lat, lon) for lat, lon in decoded]
    if not isinstance(geometry, dict):
        raise ValueError(f"Unsupported step geometry: {type(geometry).__name__}")
    if geometry.get("type", "LineString") != "LineString":
        raise ValueError(f"Unsupported step geometry type: {geometry.get('type')}")
    return [Coordinate(lat, lon) for lon, lat, *_ in geometry.get("coordinates", [])]


def leg_coordinates(leg: RouteLeg) -> List[Coordinate]:
    """Leg polyline with the repeated endpoint between adjacent steps dropped."""
    coords: List[Coordinate] = []
    for step in leg.steps:
        step_coords = step.coordinates
        if coords and step_coords and coords[-1] == step_coords[0]:
            step_coords = step_coords[1:]
        coords.extend(step_coords)
    return coords


def congestion_segments(coordinates: List[Coordinate], levels: List[Optional[str]],
                        overflow_clamp: float = PROJECTION_Y_MAX_CLAMP) -> List[CongestionSegment]:
    """
    Group per-segment congestion levels into contiguous congestion segments.

    Levels outside the known set (including missing ones) become ``unknown``.

    Args:
        coordinates: Polyline the levels annotate
        levels: One level per polyline segment (``len(coordinates) - 1``)
        overflow_clamp: Projection clamp used to measure segment lengths

    Returns:
        Segments in route order, consecutive equal levels merged
    """
    if len(levels) != max(len(coordinates) - 1, 0):
        raise ValueError(
            f"Congestion annotation has {len(levels)} levels for "
            f"{max(len(coordinates) - 1, 0)} segments"
        )

    levels = [level if level in CONGESTION_LEVELS else CONGESTION_UNKNOWN for level in levels]

    segments: List[CongestionSegment] = []
    run_start = 0
    for i in range(1, len(levels) + 1):
        if i == len(levels) or levels[i] != levels[run_start]:
            segments.append(CongestionSegment.from_coordinates(
                levels[run_start], coordinates[run_start:i + 1], overflow_clamp
            ))
            run_start = i
    return segments


def parse_directions_route(data: Dict[str, Any], identifier: str = "route",
                           route_index: int = 0,
                           overflow_clamp: float = PROJECTION_Y_MAX_CLAMP) -> Route:
    """
    Build a Route from a Directions-style response.

    Congestion is kept only when every leg carries a consistent annotation;
    otherwise the route renders without traffic coloring. Congestion lengths
    are measured with ``overflow_clamp``, which must match the clamp of the
    distance table they are compared against.
    """
    routes = data.get("routes")
    if not isinstance(routes, list) or not routes:
        raise ValueError("Route JSON must contain a non-empty 'routes' list")
    if route_index >= len(routes):
        raise ValueError(f"Route index {route_index} out of range ({len(routes)} routes)")

    raw_route = routes[route_index]
    legs: List[RouteLeg] = []
    congestion: Optional[List[CongestionSegment]] = []

    for leg_number, raw_leg in enumerate(raw_route.get("legs", [])):
        steps = [
            RouteStep(
                shape=_step_coordinates(raw_step.get("geometry")),
                distance=raw_step.get("distance", 0.0),
            )
            for raw_step in raw_leg.get("steps", [])
        ]
        leg = RouteLeg(steps=steps)
        legs.append(leg)

        levels = (raw_leg.get("annotation") or {}).get("congestion")
        if congestion is None:
            continue
        if levels is None:
            congestion = None
            continue
        try:
            congestion.extend(congestion_segments(leg_coordinates(leg), levels, overflow_clamp))
        except ValueError as e:
            logger.warning(f"Ignoring congestion for leg {leg_number}: {e}")
            congestion = None

    return Route(identifier=identifier, legs=legs, congestion=congestion or None)


def load_route(path: Union[str, Path], identifier: Optional[str] = None,
               overflow_clamp: float = PROJECTION_Y_MAX_CLAMP) -> Route:
    """Load a Directions-style route JSON file."""
    data = _read_json(path)
    if not isinstance(data, dict):
        raise ValueError("Route file must contain a mapping at the top level")
    route = parse_directions_route(data, identifier=identifier or Path(path).stem,
                                   overflow_clamp=overflow_clamp)
    logger.debug(
        f"Loaded route '{route.identifier}': {len(route.legs)} legs, {route.distance:.0f} m"
    )
    return route


def load_progress_trace(path: Union[str, Path]) -> List[ProgressSnapshot]:
    """Load a list of progress snapshots from a JSON trace file."""
    data = _read_json(path)
    if isinstance(data, dict):
        data = data.get("updates")
    if not isinstance(data, list):
        raise ValueError("Progress trace must be a list or contain an 'updates' list")
    return _SNAPSHOT_LIST.validate_python(data)
