"""
Data models for route geometry and navigation progress.

Pydantic models describing the route handed over by the routing engine
(legs -> steps -> coordinate shapes, plus optional congestion segments) and
the progress snapshots delivered by the navigation engine on every fix.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from constants import CASING_LAYER_SUFFIX, MAIN_LAYER_SUFFIX, PROJECTION_Y_MAX_CLAMP
from projection import Coordinate, planar_length


class RouteStep(BaseModel):
    """
    Maneuver-bounded portion of a leg.

    A step without a shape, or with an empty one, is valid and contributes
    no points to the flattened route.
    """
    shape: Optional[List[Coordinate]] = Field(
        default=None, description="Step polyline as (latitude, longitude) pairs"
    )
    distance: float = Field(default=0.0, ge=0.0, description="Step length in meters")

    @property
    def coordinates(self) -> List[Coordinate]:
        """Shape coordinates, empty when the step has no shape."""
        return list(self.shape) if self.shape else []


class RouteLeg(BaseModel):
    """Portion of a route between two waypoints."""
    steps: List[RouteStep] = Field(default_factory=list)

    @property
    def distance(self) -> float:
        """Sum of step distances in meters."""
        return sum(step.distance for step in self.steps)


class CongestionSegment(BaseModel):
    """
    Contiguous range of route geometry sharing one traffic classification.

    ``length`` is the planar (projected) length of the segment, the same
    metric the traveled fraction uses.
    """
    level: Optional[str] = Field(default=None, description="low/moderate/heavy/severe/unknown")
    length: float = Field(ge=0.0, description="Planar length of the segment")
    coordinates: List[Coordinate] = Field(default_factory=list)

    @classmethod
    def from_coordinates(cls, level: Optional[str], coordinates: List[Coordinate],
                         overflow_clamp: float = PROJECTION_Y_MAX_CLAMP) -> "CongestionSegment":
        """Build a segment, measuring its planar length from its coordinates."""
        return cls(level=level, length=planar_length(coordinates, overflow_clamp),
                   coordinates=coordinates)


class Route(BaseModel):
    """
    Route handed to the vanishing route line.

    The identifier names the two rendering layers the route is drawn on.
    """
    identifier: str = Field(default="route", min_length=1)
    legs: List[RouteLeg] = Field(default_factory=list)
    congestion: Optional[List[CongestionSegment]] = None

    @property
    def main_layer_id(self) -> str:
        return f"{self.identifier}.{MAIN_LAYER_SUFFIX}"

    @property
    def casing_layer_id(self) -> str:
        return f"{self.identifier}.{CASING_LAYER_SUFFIX}"

    @property
    def distance(self) -> float:
        """Sum of leg distances in meters."""
        return sum(leg.distance for leg in self.legs)


class ProgressSnapshot(BaseModel):
    """
    Navigation progress reported on a single location fix.

    Indices refer to the route that built the current distance table.
    """
    leg_index: int = Field(ge=0)
    step_index: int = Field(ge=0)
    distance_traveled: float = Field(description="Meters traveled along the current step")
    step_distance: float = Field(ge=0.0, description="Total length of the current step in meters")
    coordinate: Optional[Coordinate] = Field(default=None, description="Live user coordinate")
