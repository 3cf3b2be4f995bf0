#!/usr/bin/env python3
"""
Replay a recorded progress trace against a route and show how the vanishing
route line gradient evolves.

Usage:
    python main.py route.json trace.json [--config settings.json] [--preview out.png]
"""

import argparse
import logging
import sys
from dataclasses import dataclass
from typing import List, Optional

from pydantic import BaseModel, Field

from config import VanishingLineConfig, load_config
from layers import InMemoryLayerSink
from projection import Coordinate
from rich_console import (
    console,
    create_replay_progress,
    print_completion_summary,
    print_error,
    print_gradient,
    print_route_summary,
    setup_rich_logging,
)
from route_data import ProgressSnapshot, Route, load_progress_trace, load_route
from route_preview import RoutePreviewRenderer, save_preview
from scheduler import ManualScheduler
from vanishing_route_line import VanishingRouteLine

logger = logging.getLogger(__name__)


class ReplayConfig(BaseModel):
    route: Route
    updates: List[ProgressSnapshot]
    settings: VanishingLineConfig = Field(default_factory=VanishingLineConfig)
    fix_interval_s: float = Field(default=1.0, gt=0.0)
    preview_file: Optional[str] = None
    show_gradients: bool = False


@dataclass
class ReplayResult:
    updates: int
    accepted: int
    final_fraction: float
    completed: bool
    sink: InMemoryLayerSink
    line: VanishingRouteLine
    last_location: Optional[Coordinate] = None


def parse_args(argv: Optional[List[str]] = None) -> ReplayConfig:
    parser = argparse.ArgumentParser(
        description="Replay navigation progress against a route and print the route line gradients."
    )
    parser.add_argument("route_file", help="Directions-style route JSON")
    parser.add_argument("trace_file", help="JSON list of progress snapshots")
    parser.add_argument("--config", help="JSON file overriding colors, precision and timing")
    parser.add_argument("--route-id", help="Layer identifier prefix (default: route file name)")
    parser.add_argument("--fix-interval", type=float, default=1.0,
                        help="Seconds of virtual time between progress updates")
    parser.add_argument("--preview", help="Write a PNG preview of the final route line")
    parser.add_argument("--show-gradients", action="store_true",
                        help="Print the main line gradient after every update")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    args = parser.parse_args(argv)
    setup_rich_logging(args.verbose)

    try:
        settings = load_config(args.config)
        return ReplayConfig(
            route=load_route(args.route_file, identifier=args.route_id,
                             overflow_clamp=settings.overflow_clamp),
            updates=load_progress_trace(args.trace_file),
            settings=settings,
            fix_interval_s=args.fix_interval,
            preview_file=args.preview,
            show_gradients=args.show_gradients,
        )
    except ValueError as e:
        print_error(str(e), hint="Check the route, trace and config files")
        sys.exit(1)


def replay(config: ReplayConfig) -> ReplayResult:
    """
    Feed every progress update through a vanishing route line.

    Animations run on a virtual clock advanced by ``fix_interval_s`` after
    each update, so the replay is deterministic and instant. The last
    animation runs to completion before the result is returned.
    """
    scheduler = ManualScheduler()
    sink = InMemoryLayerSink()
    line = VanishingRouteLine(sink, scheduler, config.settings)
    line.set_route(config.route)

    accepted = 0
    final_fraction = 0.0
    last_location: Optional[Coordinate] = None

    with create_replay_progress() as progress:
        task = progress.add_task("Replaying", total=len(config.updates), fraction="0.0000")
        for number, snapshot in enumerate(config.updates, start=1):
            before = line.fraction_traveled
            line.update_progress(snapshot)
            if line.fraction_traveled != before:
                accepted += 1
            if snapshot.coordinate is not None:
                last_location = snapshot.coordinate
            if line.fraction_traveled > 0:
                final_fraction = line.fraction_traveled

            scheduler.advance(config.fix_interval_s)

            if config.show_gradients and config.route.main_layer_id in sink:
                print_gradient(f"After update {number}",
                               sink.get(config.route.main_layer_id))
            progress.update(task, advance=1, fraction=f"{line.fraction_traveled:.4f}")

    # Let the last animation settle
    scheduler.run_until_idle()

    completed = config.route.main_layer_id in sink.removed
    if completed:
        final_fraction = 1.0

    return ReplayResult(
        updates=len(config.updates),
        accepted=accepted,
        final_fraction=final_fraction,
        completed=completed,
        sink=sink,
        line=line,
        last_location=last_location,
    )


def render_preview(result: ReplayResult, path: str) -> None:
    """Render the final main line and casing gradients to an image file."""
    state = result.line.state
    main = result.sink.get(state.route.main_layer_id)
    casing = result.sink.get(state.route.casing_layer_id)
    if main is None or casing is None:
        main = result.line.animator.main_line_stops(state, result.final_fraction)
        casing = result.line.animator.casing_stops(result.final_fraction)

    image = RoutePreviewRenderer(overflow_clamp=result.line.config.overflow_clamp).render(
        state.route_points.flat_list, state.distances, main, casing, result.last_location
    )
    save_preview(image, path)


def main(argv: Optional[List[str]] = None) -> int:
    config = parse_args(argv)
    route = config.route
    route_points = sum(len(step.coordinates) for leg in route.legs for step in leg.steps)

    print_route_summary(
        route.identifier,
        legs=len(route.legs),
        steps=sum(len(leg.steps) for leg in route.legs),
        points=route_points,
        distance_m=route.distance,
        congestion_segments=len(route.congestion) if route.congestion else None,
        updates=len(config.updates),
    )

    result = replay(config)

    if config.preview_file:
        try:
            render_preview(result, config.preview_file)
        except OSError as e:
            print_error(f"Could not write preview: {e}")
            return 1

    if not result.completed and route.main_layer_id in result.sink:
        print_gradient("Main line", result.sink.get(route.main_layer_id))
        console.print_json(data=result.sink.expression(route.main_layer_id))

    print_completion_summary(result.updates, result.accepted, result.final_fraction,
                             result.completed, config.preview_file)
    return 0


if __name__ == "__main__":
    sys.exit(main())
