"""
Constants for the vanishing route line renderer.

Centralized definitions for route line colors, gradient precision,
projection clamps and animation timing.
"""

from typing import Tuple
from dataclasses import dataclass


# =============================================================================
# Colors (RGBA format, alpha 0-255)
# =============================================================================

@dataclass(frozen=True)
class Colors:
    """Route line colors in RGBA format."""
    # Route line base palette
    ROUTE_CASING: Tuple[int, int, int, int] = (47, 122, 198, 255)    # Outline around the main line
    TRAVERSED: Tuple[int, int, int, int] = (0, 0, 0, 0)              # Fully transparent once passed

    # Traffic congestion
    TRAFFIC_UNKNOWN: Tuple[int, int, int, int] = (86, 168, 251, 255)
    TRAFFIC_LOW: Tuple[int, int, int, int] = (86, 168, 251, 255)
    TRAFFIC_MODERATE: Tuple[int, int, int, int] = (243, 161, 70, 255)   # Amber
    TRAFFIC_HEAVY: Tuple[int, int, int, int] = (230, 79, 93, 255)       # Red
    TRAFFIC_SEVERE: Tuple[int, int, int, int] = (139, 5, 19, 255)       # Dark red

    # Preview
    USER_MARKER: Tuple[int, int, int] = (255, 100, 0)     # Orange puck
    VOID_BLACK: Tuple[int, int, int] = (15, 18, 22)
    STEEL_DARK: Tuple[int, int, int] = (80, 85, 90)


COLORS = Colors()


# =============================================================================
# Congestion Levels
# =============================================================================

CONGESTION_LOW = "low"
CONGESTION_MODERATE = "moderate"
CONGESTION_HEAVY = "heavy"
CONGESTION_SEVERE = "severe"
CONGESTION_UNKNOWN = "unknown"

CONGESTION_LEVELS = (
    CONGESTION_LOW,
    CONGESTION_MODERATE,
    CONGESTION_HEAVY,
    CONGESTION_SEVERE,
    CONGESTION_UNKNOWN,
)


# =============================================================================
# Projection
# =============================================================================

PROJECTION_Y_MIN = 0.0
PROJECTION_Y_MAX_CLAMP = 1.0         # Overflow clamp for latitudes south of the unit square
PROJECTION_Y_LEGACY_MAX_CLAMP = 1.1  # Clamp value of older rendered output

# Mean earth radius used for along-line step distances
EARTH_RADIUS_METERS = 6371008.8


# =============================================================================
# Gradient Stops
# =============================================================================

GRADIENT_STOP_EPSILON = 1e-9     # Offset keeping adjacent color bands from blending
GRADIENT_STOP_PRECISION = 12     # Decimal places kept on every stop position


# =============================================================================
# Animation
# =============================================================================

ANIMATION_INTERVAL_S = 0.05      # Tick every 50ms
ANIMATION_DURATION_MS = 1000.0   # Interpolate over one second


# =============================================================================
# Layer Identifiers
# =============================================================================

MAIN_LAYER_SUFFIX = "main"
CASING_LAYER_SUFFIX = "casing"


# =============================================================================
# Route Preview
# =============================================================================

PREVIEW_SIZE = 512
PREVIEW_PADDING = 0.08           # Fraction of the image left empty on each side
PREVIEW_SUPERSAMPLE = 2
PREVIEW_CASING_WIDTH = 9
PREVIEW_LINE_WIDTH = 5
