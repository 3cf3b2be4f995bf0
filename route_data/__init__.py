"""
Route data module for the vanishing route line.

Models for route geometry, congestion annotations and navigation progress,
plus loaders for Directions-style route JSON and progress trace files.
"""

from route_data.data_models import (
    CongestionSegment,
    ProgressSnapshot,
    Route,
    RouteLeg,
    RouteStep,
)
from route_data.loader import load_progress_trace, load_route

__all__ = [
    "CongestionSegment",
    "ProgressSnapshot",
    "Route",
    "RouteLeg",
    "RouteStep",
    "load_progress_trace",
    "load_route",
]
