"""
Pytest configuration and fixtures for vanishing route line tests.

Provides reusable routes, congestion segments, palettes and sinks.
"""

import pytest
from typing import List

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import RouteLineColors, VanishingLineConfig
from layers import InMemoryLayerSink
from projection import Coordinate, line_length
from route_data.data_models import CongestionSegment, Route, RouteLeg, RouteStep
from scheduler import ManualScheduler


def make_step(coords: List[Coordinate]) -> RouteStep:
    """Step whose distance matches its shape's length."""
    return RouteStep(shape=coords, distance=line_length(coords))


# Points along the equator, 0.001 degrees (~111 m) apart
A = Coordinate(0.0, 0.000)
B = Coordinate(0.0, 0.001)
C = Coordinate(0.0, 0.002)
D = Coordinate(0.0, 0.003)
E = Coordinate(0.0, 0.004)


@pytest.fixture
def two_leg_route() -> Route:
    """Two legs with one 3-point step each, sharing the endpoint C."""
    return Route(
        identifier="primary",
        legs=[
            RouteLeg(steps=[make_step([A, B, C])]),
            RouteLeg(steps=[make_step([C, D, E])]),
        ],
    )


@pytest.fixture
def multi_step_route() -> Route:
    """One leg with three steps, the middle one without a shape."""
    return Route(
        identifier="multi",
        legs=[
            RouteLeg(steps=[
                make_step([A, B]),
                RouteStep(shape=None, distance=0.0),
                make_step([B, C, D, E]),
            ]),
        ],
    )


@pytest.fixture
def congestion_segments() -> List[CongestionSegment]:
    """Segments covering 1/4, 1/4 and 1/2 of the route."""
    return [
        CongestionSegment(level="low", length=1.0),
        CongestionSegment(level="heavy", length=1.0),
        CongestionSegment(level="severe", length=2.0),
    ]


@pytest.fixture
def palette() -> RouteLineColors:
    """Palette with a distinct color for every role."""
    return RouteLineColors(
        traversed=(0, 0, 0, 0),
        casing=(10, 10, 10, 255),
        traffic_unknown=(30, 30, 30, 255),
        traffic_low=(40, 40, 40, 255),
        traffic_moderate=(50, 50, 50, 255),
        traffic_heavy=(60, 60, 60, 255),
        traffic_severe=(70, 70, 70, 255),
    )


@pytest.fixture
def line_config(palette) -> VanishingLineConfig:
    return VanishingLineConfig(colors=palette)


@pytest.fixture
def sink() -> InMemoryLayerSink:
    return InMemoryLayerSink()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()
