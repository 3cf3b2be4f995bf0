"""
Gradient stop building for the vanishing route line.

Turns a traveled fraction, and optionally per-segment traffic congestion,
into sorted (position, color) stops. Stops straddle every color change by
a small epsilon so adjacent bands do not blend into each other when the
line is rendered.
"""

import bisect
import logging
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from config import RGBA, RouteLineColors
from constants import (
    CONGESTION_HEAVY,
    CONGESTION_LOW,
    CONGESTION_MODERATE,
    CONGESTION_SEVERE,
    GRADIENT_STOP_EPSILON,
    GRADIENT_STOP_PRECISION,
)
from route_data.data_models import CongestionSegment

logger = logging.getLogger(__name__)


class GradientStops:
    """
    Mapping from line position to color, kept sorted by position.

    Writing to a position that already has a stop replaces its color
    (last write wins).
    """

    def __init__(self, stops: Optional[Dict[float, RGBA]] = None):
        self._positions: List[float] = []
        self._colors: Dict[float, RGBA] = {}
        for position, color in (stops or {}).items():
            self[position] = color

    def __setitem__(self, position: float, color: RGBA) -> None:
        position = float(position)
        if position not in self._colors:
            bisect.insort(self._positions, position)
        self._colors[position] = color

    def __getitem__(self, position: float) -> RGBA:
        return self._colors[position]

    def __delitem__(self, position: float) -> None:
        del self._colors[position]
        self._positions.remove(position)

    def __contains__(self, position: float) -> bool:
        return position in self._colors

    def __len__(self) -> int:
        return len(self._positions)

    def __iter__(self) -> Iterator[float]:
        return iter(list(self._positions))

    def __eq__(self, other) -> bool:
        if isinstance(other, GradientStops):
            return self.items() == other.items()
        if isinstance(other, dict):
            return self.items() == sorted(other.items())
        return NotImplemented

    def __repr__(self) -> str:
        return f"GradientStops({dict(self.items())})"

    def items(self) -> List[Tuple[float, RGBA]]:
        return [(p, self._colors[p]) for p in self._positions]

    def positions(self) -> List[float]:
        return list(self._positions)

    def first(self) -> Optional[Tuple[float, RGBA]]:
        """Stop with the lowest position, or None when empty."""
        if not self._positions:
            return None
        p = self._positions[0]
        return p, self._colors[p]

    def color_at(self, position: float) -> Optional[RGBA]:
        """Color of the last stop at or before ``position`` (step interpolation).

        Positions before the first stop take the first stop's color.
        """
        if not self._positions:
            return None
        i = bisect.bisect_right(self._positions, position) - 1
        return self._colors[self._positions[max(i, 0)]]

    def filtered(self, min_position: float) -> "GradientStops":
        """Copy keeping only stops at or after ``min_position``."""
        return GradientStops({p: c for p, c in self.items() if p >= min_position})

    def rounded(self, precision: int) -> "GradientStops":
        """Copy with positions rounded and positions outside [0, 1] dropped.

        Stops that round onto the same position merge, the later one winning.
        """
        result = GradientStops()
        for position, color in self.items():
            if position < 0.0 or position > 1.0:
                continue
            result[round(position, precision)] = color
        return result


def congestion_color(level: Optional[str], colors: RouteLineColors) -> RGBA:
    """Given a congestion level, return its associated color."""
    if level == CONGESTION_LOW:
        return colors.traffic_low
    elif level == CONGESTION_MODERATE:
        return colors.traffic_moderate
    elif level == CONGESTION_HEAVY:
        return colors.traffic_heavy
    elif level == CONGESTION_SEVERE:
        return colors.traffic_severe
    return colors.traffic_unknown


def _congestion_stops(segments: Sequence[CongestionSegment], total: float,
                      colors: RouteLineColors, epsilon: float) -> GradientStops:
    stops = GradientStops()
    accumulated = 0.0
    last = len(segments) - 1

    for index, segment in enumerate(segments):
        color = congestion_color(segment.level, colors)
        start = accumulated / total
        accumulated += segment.length
        end = accumulated / total

        if index == 0:
            stops[0.0] = color
        else:
            stops[start + epsilon] = color

        if index == last:
            stops[1.0] = color
        else:
            stops[end - epsilon] = color
            stops[end + epsilon] = congestion_color(segments[index + 1].level, colors)

    return stops


def build_gradient_stops(fraction_traveled: float,
                         congestion: Optional[Sequence[CongestionSegment]] = None,
                         colors: Optional[RouteLineColors] = None,
                         epsilon: float = GRADIENT_STOP_EPSILON,
                         precision: int = GRADIENT_STOP_PRECISION) -> GradientStops:
    """
    Build gradient stops for a route line at the given traveled fraction.

    Without congestion the line is the traversed color up to the fraction and
    the casing color after it. With congestion every segment contributes its
    traffic color, the stops behind the fraction are discarded and the
    traveled part is painted over with the traversed color.

    Args:
        fraction_traveled: Traveled fraction, clamped into [0, 1]
        congestion: Congestion segments in route order, or None
        colors: Route line palette
        epsilon: Offset placed around every color change
        precision: Decimal places kept on stop positions

    Returns:
        Sorted stops with positions in [0, 1]
    """
    colors = colors or RouteLineColors()
    fraction = min(max(fraction_traveled, 0.0), 1.0)

    total = sum(segment.length for segment in congestion) if congestion else 0.0

    if total > 0.0:
        stops = _congestion_stops(congestion, total, colors, epsilon).filtered(fraction)
        nearest = stops.first()
        if nearest is not None:
            stops[0.0] = colors.traversed
            stops[fraction - epsilon] = colors.traversed
            stops[fraction] = nearest[1]
    else:
        if congestion:
            logger.debug("Congestion segments have zero total length, ignoring")
        stops = GradientStops()
        stops[0.0] = colors.traversed
        stops[fraction - epsilon] = colors.traversed
        stops[fraction] = colors.casing

    return stops.rounded(precision)
