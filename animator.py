"""
Gradient animation for the vanishing route line.

When the traveled fraction changes, the route line does not jump to the new
position. The animator interpolates from the previous fraction to the
current one over a short window and pushes a fresh gradient to the main
line and casing layers on every tick.
"""

import logging
from typing import Optional

from config import VanishingLineConfig
from gradient import GradientStops, build_gradient_stops
from layers import RouteLayerSink
from progress import RouteLineState
from scheduler import ScheduledTask, Scheduler

logger = logging.getLogger(__name__)


class GradientAnimator:
    """
    Schedules the interpolated gradient updates of a displayed route.

    At most one animation is outstanding per route view: starting a new one
    always cancels the previous one first.

    Args:
        sink: Destination for layer gradients
        scheduler: Source of repeating tasks and clock
        config: Colors, gradient precision and animation timing
    """

    def __init__(self, sink: RouteLayerSink, scheduler: Scheduler,
                 config: Optional[VanishingLineConfig] = None):
        self.sink = sink
        self.scheduler = scheduler
        self.config = config or VanishingLineConfig()

    def main_line_stops(self, state: RouteLineState, fraction: float) -> GradientStops:
        congestion = state.route.congestion if state.route is not None else None
        return build_gradient_stops(
            fraction, congestion, self.config.colors,
            self.config.stop_epsilon, self.config.stop_precision,
        )

    def casing_stops(self, fraction: float) -> GradientStops:
        return build_gradient_stops(
            fraction, None, self.config.colors,
            self.config.stop_epsilon, self.config.stop_precision,
        )

    def push(self, state: RouteLineState, fraction: float) -> None:
        """Apply the gradients for ``fraction`` to both route layers."""
        if state.route is None:
            return
        self.sink.set_line_gradient(state.route.main_layer_id, self.main_line_stops(state, fraction))
        self.sink.set_line_gradient(state.route.casing_layer_id, self.casing_stops(fraction))

    def update_route(self, state: RouteLineState) -> Optional[ScheduledTask]:
        """
        Start animating the route line toward the current traveled fraction.

        A fully traveled route has both layers removed and its fractions
        reset instead. Nothing is scheduled when the fraction did not change.

        Returns:
            The scheduled animation task, or None
        """
        state.cancel_animation()
        if state.route is None:
            return None

        traveled = state.traveled
        if traveled.current_fraction >= 1.0:
            self.sink.remove_layer(state.route.main_layer_id)
            self.sink.remove_layer(state.route.casing_layer_id)
            traveled.reset()
            logger.info(f"Route '{state.route.identifier}' fully traveled, layers removed")
            return None

        if traveled.current_fraction == traveled.previous_fraction:
            return None

        start_fraction = traveled.previous_fraction
        difference = traveled.current_fraction - start_fraction
        duration_ms = self.config.animation_duration_ms
        start_time = self.scheduler.now()

        def tick() -> bool:
            elapsed_ms = (self.scheduler.now() - start_time) * 1000.0
            elapsed_fraction = min(elapsed_ms, duration_ms) / duration_ms
            self.push(state, start_fraction + difference * elapsed_fraction)
            return elapsed_ms < duration_ms

        state.animation = self.scheduler.schedule_repeating(self.config.animation_interval_s, tick)
        logger.debug(
            f"Animating route line {start_fraction:.4f} -> {traveled.current_fraction:.4f}"
        )
        return state.animation
