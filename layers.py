"""
Rendering sinks for route line layers.

The vanishing route line never talks to a map directly. It pushes gradient
stops to named layers through a RouteLayerSink and asks the sink to remove
layers once the route is fully traveled.
"""

import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, List, Optional, Tuple

from config import RGBA
from gradient import GradientStops


def rgba_string(color: RGBA) -> str:
    """Format an RGBA tuple as a CSS-style ``rgba()`` string."""
    r, g, b, a = color
    return f"rgba({r}, {g}, {b}, {round(a / 255.0, 3)})"


def line_gradient_expression(stops: GradientStops) -> List[Any]:
    """
    Encode gradient stops as a step expression over line progress.

    ``["step", ["line-progress"], color_0, position_1, color_1, ...]`` where
    ``color_0`` is the color of the first stop.
    """
    items = stops.items()
    if not items:
        return []
    expression: List[Any] = ["step", ["line-progress"], rgba_string(items[0][1])]
    for position, color in items[1:]:
        expression.extend([position, rgba_string(color)])
    return expression


class RouteLayerSink(ABC):
    """
    Destination for route line gradients.

    Subclasses must implement:
        - set_line_gradient(layer_id, stops): Apply gradient stops to a layer
        - remove_layer(layer_id): Drop a layer, returning whether it existed
    """

    @abstractmethod
    def set_line_gradient(self, layer_id: str, stops: GradientStops) -> None:
        pass

    @abstractmethod
    def remove_layer(self, layer_id: str) -> bool:
        pass


class InMemoryLayerSink(RouteLayerSink):
    """
    Sink keeping the latest gradient of every layer in memory.

    Safe to update from a scheduler thread while the owner reads it.

    Example:
        sink = InMemoryLayerSink()
        sink.set_line_gradient('route.main', stops)
        sink.get('route.main')
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._layers: Dict[str, GradientStops] = {}
        self._order: List[str] = []
        self._update_counts: Dict[str, int] = {}
        self.removed: List[str] = []

    def set_line_gradient(self, layer_id: str, stops: GradientStops) -> None:
        with self._lock:
            if layer_id not in self._layers:
                self._order.append(layer_id)
            self._layers[layer_id] = stops
            self._update_counts[layer_id] = self._update_counts.get(layer_id, 0) + 1

    def remove_layer(self, layer_id: str) -> bool:
        with self._lock:
            self.removed.append(layer_id)
            if layer_id in self._layers:
                self._order.remove(layer_id)
                del self._layers[layer_id]
                return True
            return False

    def get(self, layer_id: str) -> Optional[GradientStops]:
        """Latest gradient of a layer, or None if not present."""
        with self._lock:
            return self._layers.get(layer_id)

    def expression(self, layer_id: str) -> Optional[List[Any]]:
        """Latest gradient of a layer encoded as a line-gradient expression."""
        stops = self.get(layer_id)
        return line_gradient_expression(stops) if stops is not None else None

    def update_count(self, layer_id: str) -> int:
        """Number of gradients pushed to a layer so far."""
        with self._lock:
            return self._update_counts.get(layer_id, 0)

    def __contains__(self, layer_id: str) -> bool:
        with self._lock:
            return layer_id in self._layers

    def __len__(self) -> int:
        with self._lock:
            return len(self._layers)

    def __iter__(self) -> Iterator[Tuple[str, GradientStops]]:
        with self._lock:
            snapshot = [(name, self._layers[name]) for name in self._order]
        return iter(snapshot)
