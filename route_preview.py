"""
Route line preview renderer.

Draws a route with its casing and main line gradients into an RGB image,
the way a map would paint the two line layers. Used by the replay CLI to
check gradient output without a map.

Line progress of every point comes from the distance table, so the preview
colors the line with exactly the positions the gradient stops refer to.
"""

import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np
from PIL import Image, ImageDraw

from constants import (
    COLORS,
    PREVIEW_CASING_WIDTH,
    PREVIEW_LINE_WIDTH,
    PREVIEW_PADDING,
    PREVIEW_SIZE,
    PREVIEW_SUPERSAMPLE,
    PROJECTION_Y_MAX_CLAMP,
)
from gradient import GradientStops
from projection import Coordinate, project
from route_points import DistanceTable

logger = logging.getLogger(__name__)


class RoutePreviewRenderer:
    """Renders route line gradients onto a square preview image.

    Args:
        scale: Scaling factor for image size and line widths (default 1.0)
        overflow_clamp: Projection clamp, matching the distance table's
    """

    def __init__(self, scale: float = 1.0, overflow_clamp: float = PROJECTION_Y_MAX_CLAMP):
        self.scale = scale
        self.overflow_clamp = overflow_clamp
        self.size = int(PREVIEW_SIZE * scale)
        self.padding = PREVIEW_PADDING

        # Render at a higher resolution and downscale for anti-aliased lines
        self._supersample = PREVIEW_SUPERSAMPLE
        self._internal_size = self.size * self._supersample
        self._casing_width = max(2, int(PREVIEW_CASING_WIDTH * scale * self._supersample))
        self._line_width = max(1, int(PREVIEW_LINE_WIDTH * scale * self._supersample))

    def _to_screen(self, points: Sequence[Coordinate]) -> List[Tuple[float, float]]:
        """Fit projected points into the image, preserving aspect ratio."""
        projected = np.array([project(p, self.overflow_clamp) for p in points], dtype=np.float64)
        mins = projected.min(axis=0)
        span = float((projected.max(axis=0) - mins).max())
        usable = self._internal_size * (1 - 2 * self.padding)
        offset = self._internal_size * self.padding

        if span <= 0:
            center = self._internal_size / 2
            return [(center, center)] * len(points)

        screen = (projected - mins) / span * usable + offset
        return [(float(x), float(y)) for x, y in screen]

    @staticmethod
    def _line_progress(table: DistanceTable) -> np.ndarray:
        total = table.total_distance
        if total <= 0:
            return np.zeros(len(table))
        return 1.0 - table.distance_remaining / total

    def _draw_layer(self, screen: List[Tuple[float, float]], progress: np.ndarray,
                    stops: GradientStops, width: int) -> Image.Image:
        layer = Image.new("RGBA", (self._internal_size, self._internal_size), (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)
        for i in range(len(screen) - 1):
            # Color each segment by the gradient at its midpoint
            color = stops.color_at((progress[i] + progress[i + 1]) / 2)
            if color is None or color[3] == 0:
                continue
            draw.line([screen[i], screen[i + 1]], fill=tuple(color), width=width)
        return layer

    def render(self, points: Sequence[Coordinate], table: Optional[DistanceTable],
               main_stops: GradientStops, casing_stops: GradientStops,
               user_location: Optional[Coordinate] = None) -> np.ndarray:
        """
        Render the route's casing and main line with their current gradients.

        Args:
            points: Flat route points
            table: Distance table built from ``points``
            main_stops: Gradient of the main line layer
            casing_stops: Gradient of the casing layer
            user_location: Optional live position to mark

        Returns:
            RGB numpy array of the preview
        """
        img = Image.new("RGBA", (self._internal_size, self._internal_size),
                        COLORS.VOID_BLACK + (255,))

        if table is not None and len(points) >= 2:
            screen_points = list(points) + ([user_location] if user_location else [])
            screen = self._to_screen(screen_points)
            route_screen = screen[:len(points)]
            progress = self._line_progress(table)

            img = Image.alpha_composite(
                img, self._draw_layer(route_screen, progress, casing_stops, self._casing_width))
            img = Image.alpha_composite(
                img, self._draw_layer(route_screen, progress, main_stops, self._line_width))

            if user_location is not None:
                x, y = screen[-1]
                r = self._line_width * 1.5
                draw = ImageDraw.Draw(img)
                draw.ellipse([x - r, y - r, x + r, y + r], fill=COLORS.USER_MARKER + (255,),
                             outline=COLORS.STEEL_DARK + (255,))

        draw = ImageDraw.Draw(img)
        border_width = max(1, int(2 * self.scale * self._supersample))
        draw.rectangle([0, 0, self._internal_size - 1, self._internal_size - 1],
                       outline=COLORS.STEEL_DARK + (255,), width=border_width)

        if self._supersample > 1:
            img = img.resize((self.size, self.size), Image.Resampling.LANCZOS)

        return np.array(img.convert("RGB"))


def save_preview(image: np.ndarray, path: str) -> None:
    """Write a rendered preview to disk (format from the file extension)."""
    Image.fromarray(image).save(path)
    logger.debug(f"Saved route preview to {path}")
