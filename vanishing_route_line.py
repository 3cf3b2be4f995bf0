"""
Vanishing route line controller.

Owns the state of one displayed route and wires the engine together:

- set_route: flatten the route and build its distance table (once per route)
- update_progress: locate the upcoming point, update the traveled fraction
  and animate the line toward it (on every location fix)
- teardown: cancel any animation and drop all progress

Progress updates must arrive serially, in order, from a single caller.
"""

import logging
from typing import Optional

from animator import GradientAnimator
from config import VanishingLineConfig
from layers import RouteLayerSink
from progress import RouteLineState, update_traveled_fraction
from projection import Coordinate
from route_data.data_models import ProgressSnapshot, Route
from route_points import (
    ProgressIndexError,
    build_distance_table,
    flatten_route,
    locate_upcoming_index,
)
from scheduler import ScheduledTask, Scheduler, ThreadingScheduler

logger = logging.getLogger(__name__)


class VanishingRouteLine:
    """
    Makes the traveled part of a route line recede as the user moves.

    Example:
        line = VanishingRouteLine(sink)
        line.set_route(route)
        for snapshot in progress_updates:
            line.update_progress(snapshot)

    Args:
        sink: Destination for the main line and casing gradients
        scheduler: Scheduler for gradient animations (threaded by default)
        config: Colors, precision, projection clamp and animation timing
    """

    def __init__(self, sink: RouteLayerSink, scheduler: Optional[Scheduler] = None,
                 config: Optional[VanishingLineConfig] = None):
        self.config = config or VanishingLineConfig()
        self.scheduler = scheduler or ThreadingScheduler()
        self.animator = GradientAnimator(sink, self.scheduler, self.config)
        self.state = RouteLineState()

    @property
    def fraction_traveled(self) -> float:
        return self.state.traveled.current_fraction

    def set_route(self, route: Optional[Route]) -> None:
        """Replace the displayed route, rebuilding its points and distances."""
        self.teardown()
        route_points = flatten_route(route)
        self.state.route = route
        self.state.route_points = route_points
        self.state.distances = build_distance_table(route_points.flat_list,
                                                    self.config.overflow_clamp)

        if route is not None:
            logger.info(
                f"Route '{route.identifier}': {len(route.legs)} legs, "
                f"{len(route_points.flat_list)} points"
            )
            self.animator.push(self.state, 0.0)

    def update_upcoming_index(self, snapshot: ProgressSnapshot) -> Optional[int]:
        """
        Find and cache the index of the upcoming distance table entry.

        Returns:
            The located index, or None when there is nothing to locate or the
            snapshot is out of range for the stored route (the cached index
            is then left unchanged)
        """
        if self.state.distances is None:
            self.state.upcoming_index = None
            return None

        try:
            index = locate_upcoming_index(self.state.route_points, snapshot)
        except ProgressIndexError as e:
            logger.warning(f"Skipping progress update: {e}")
            return None

        self.state.upcoming_index = index
        return index

    def update_traveled(self, coordinate: Optional[Coordinate]) -> bool:
        """Update the traveled fraction from the live user coordinate."""
        distances, index = self.state.distances, self.state.upcoming_index
        if distances is None or index is None or coordinate is None:
            return False
        return update_traveled_fraction(self.state.traveled, distances, index, coordinate,
                                        self.config.overflow_clamp)

    def update_route(self) -> Optional[ScheduledTask]:
        """Animate the route layers toward the current traveled fraction."""
        return self.animator.update_route(self.state)

    def update_progress(self, snapshot: ProgressSnapshot,
                        coordinate: Optional[Coordinate] = None) -> Optional[ScheduledTask]:
        """
        Process one progress update end to end.

        Args:
            snapshot: Navigation progress for this fix
            coordinate: Live coordinate, defaults to the snapshot's

        Returns:
            The animation task started for this update, or None
        """
        if self.state.route is None:
            return None
        if self.update_upcoming_index(snapshot) is None:
            return None
        if not self.update_traveled(coordinate if coordinate is not None else snapshot.coordinate):
            # Dropped as noise, any running animation keeps going
            return None
        return self.update_route()

    def teardown(self) -> None:
        """Cancel any outstanding animation and drop all progress."""
        self.state.cancel_animation()
        self.state = RouteLineState()
