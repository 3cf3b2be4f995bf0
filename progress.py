"""
Traveled fraction tracking for the vanishing route line.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from constants import PROJECTION_Y_MAX_CLAMP
from projection import Coordinate, planar_distance
from route_data.data_models import Route
from route_points import DistanceTable, FlatRoutePoints
from scheduler import ScheduledTask

logger = logging.getLogger(__name__)


@dataclass
class TraveledState:
    """Current and previous traveled fraction of the displayed route.

    Both values are in [0, 1]. ``previous_fraction <= current_fraction`` is
    not guaranteed: a reset drops both back to 0.
    """
    current_fraction: float = 0.0
    previous_fraction: float = 0.0

    @property
    def delta(self) -> float:
        return self.current_fraction - self.previous_fraction

    def advance(self, fraction: float) -> None:
        """Shift the current fraction into previous and store the new one."""
        self.previous_fraction = self.current_fraction
        self.current_fraction = fraction

    def reset(self) -> None:
        self.current_fraction = 0.0
        self.previous_fraction = 0.0


@dataclass
class RouteLineState:
    """Per-view state of a displayed route.

    Geometry fields are rebuilt wholesale when a new route is set and are
    read-only in between. ``animation`` is the single outstanding gradient
    animation, if any.
    """
    route: Optional[Route] = None
    route_points: FlatRoutePoints = field(default_factory=FlatRoutePoints)
    distances: Optional[DistanceTable] = None
    upcoming_index: Optional[int] = None
    traveled: TraveledState = field(default_factory=TraveledState)
    animation: Optional[ScheduledTask] = None

    def cancel_animation(self) -> None:
        if self.animation is not None:
            self.animation.cancel()
            self.animation = None


def update_traveled_fraction(state: TraveledState, table: DistanceTable, index: int,
                             coordinate: Coordinate,
                             overflow_clamp: float = PROJECTION_Y_MAX_CLAMP) -> bool:
    """
    Update the traveled fraction from the located upcoming point and live position.

    The remaining distance is the upcoming point's precomputed remaining
    distance extended by the exact position of the user. Updates implying
    more remaining distance than the whole route, or a negative offset, are
    treated as noise and dropped.

    Args:
        state: Traveled state to update in place
        table: Distance table of the displayed route
        index: Located upcoming point index
        coordinate: Live user coordinate

    Returns:
        True if the state changed
    """
    entry = table[index]
    remaining = entry.distance_remaining + planar_distance(entry.point, coordinate, overflow_clamp)
    total = table.total_distance

    if total <= 0.0 or total < remaining:
        logger.debug(f"Dropping progress update: remaining {remaining:.9f} > total {total:.9f}")
        return False

    offset = 1.0 - remaining / total
    if offset < 0.0:
        return False

    state.advance(offset)
    return True
