"""
Configuration for the vanishing route line.

Pydantic models holding the route line palette, gradient precision,
projection clamp and animation timing. Defaults come from constants.py;
a JSON file can override any of them.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from constants import (
    ANIMATION_DURATION_MS,
    ANIMATION_INTERVAL_S,
    COLORS,
    GRADIENT_STOP_EPSILON,
    GRADIENT_STOP_PRECISION,
    PROJECTION_Y_LEGACY_MAX_CLAMP,
    PROJECTION_Y_MAX_CLAMP,
)

logger = logging.getLogger(__name__)

RGBA = Tuple[int, int, int, int]


def parse_color(value) -> RGBA:
    """
    Parse a color given as ``#RRGGBB``, ``#RRGGBBAA`` or an RGB(A) sequence.

    Returns:
        RGBA tuple with channels in 0-255
    """
    if isinstance(value, str):
        hex_str = value.lstrip("#")
        if len(hex_str) not in (6, 8):
            raise ValueError(f"Invalid hex color: {value}")
        try:
            channels = [int(hex_str[i:i + 2], 16) for i in range(0, len(hex_str), 2)]
        except ValueError as exc:
            raise ValueError(f"Invalid hex color: {value}") from exc
    else:
        channels = list(value)

    if len(channels) == 3:
        channels.append(255)
    if len(channels) != 4:
        raise ValueError(f"Color must have 3 or 4 channels, got {len(channels)}")
    for c in channels:
        if not 0 <= int(c) <= 255:
            raise ValueError(f"Color channel {c} outside 0-255")
    return tuple(int(c) for c in channels)


class RouteLineColors(BaseModel):
    """Palette for the route line, its casing and traffic congestion."""
    model_config = ConfigDict(frozen=True)

    traversed: RGBA = COLORS.TRAVERSED
    casing: RGBA = COLORS.ROUTE_CASING
    traffic_unknown: RGBA = COLORS.TRAFFIC_UNKNOWN
    traffic_low: RGBA = COLORS.TRAFFIC_LOW
    traffic_moderate: RGBA = COLORS.TRAFFIC_MODERATE
    traffic_heavy: RGBA = COLORS.TRAFFIC_HEAVY
    traffic_severe: RGBA = COLORS.TRAFFIC_SEVERE

    @field_validator("*", mode="before")
    @classmethod
    def _parse_color(cls, value):
        return parse_color(value)


class VanishingLineConfig(BaseModel):
    """Settings for gradient building, projection and animation."""
    model_config = ConfigDict(frozen=True)

    colors: RouteLineColors = Field(default_factory=RouteLineColors)
    stop_epsilon: float = Field(default=GRADIENT_STOP_EPSILON, gt=0.0, lt=0.01)
    stop_precision: int = Field(default=GRADIENT_STOP_PRECISION, ge=1, le=16)
    animation_interval_s: float = Field(default=ANIMATION_INTERVAL_S, gt=0.0, le=1.0)
    animation_duration_ms: float = Field(default=ANIMATION_DURATION_MS, gt=0.0)
    legacy_projection_clamp: bool = Field(
        default=False,
        description="Clamp overflowing latitudes to 1.1 like older rendered output",
    )

    @model_validator(mode="after")
    def _epsilon_survives_rounding(self) -> "VanishingLineConfig":
        if round(self.stop_epsilon, self.stop_precision) == 0.0:
            raise ValueError(
                f"stop_epsilon {self.stop_epsilon} vanishes at {self.stop_precision} decimals"
            )
        return self

    @property
    def overflow_clamp(self) -> float:
        return PROJECTION_Y_LEGACY_MAX_CLAMP if self.legacy_projection_clamp else PROJECTION_Y_MAX_CLAMP


def load_config(path: Optional[Union[str, Path]] = None) -> VanishingLineConfig:
    """
    Load configuration from a JSON file.

    Args:
        path: JSON file path, or None for defaults

    Raises:
        ValueError: Missing file, invalid JSON or invalid values
    """
    if path is None:
        return VanishingLineConfig()

    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = json.load(handle)
    except FileNotFoundError as exc:
        raise ValueError(f"Config file not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in config {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ValueError("Config file must contain a mapping at the top level")

    config = VanishingLineConfig.model_validate(data)
    logger.debug(f"Loaded config from {path}")
    return config
