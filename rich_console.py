"""
Rich console configuration for the vanishing route line replay tool.

Provides progress bars, panels, gradient tables and styled logging.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    BarColumn,
    TaskProgressColumn,
    TimeElapsedColumn,
    MofNCompleteColumn,
)

from gradient import GradientStops

ROUTE_THEME = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "bold green",
    "highlight": "bold magenta",
    "muted": "dim",
    "route": "bold blue",
    "fraction": "bold cyan",
})

# Global console instance
console = Console(theme=ROUTE_THEME)


def setup_rich_logging(verbose: bool = False) -> None:
    """
    Configure logging to use Rich handler.

    Args:
        verbose: Enable DEBUG level logging with full details
    """
    level = logging.DEBUG if verbose else logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[
            RichHandler(
                console=console,
                show_time=verbose,
                show_path=verbose,
                rich_tracebacks=True,
                tracebacks_show_locals=verbose,
                markup=True,
            )
        ],
        force=True,  # Override any existing configuration
    )


def create_replay_progress() -> Progress:
    """
    Create a progress bar for replaying progress updates.

    Returns:
        Configured Progress instance with a ``fraction`` field
    """
    return Progress(
        SpinnerColumn("dots"),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(bar_width=40, style="cyan", complete_style="green"),
        TaskProgressColumn(),
        MofNCompleteColumn(),
        TextColumn("[fraction]{task.fields[fraction]}[/]"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )


def print_route_summary(route_id: str, legs: int, steps: int, points: int,
                        congestion_segments: Optional[int], updates: int,
                        distance_m: Optional[float] = None) -> None:
    """Print a styled summary of the route about to be replayed."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Key", style="dim")
    table.add_column("Value", style="bold")

    table.add_row("Route", f"[route]{route_id}[/]")
    table.add_row("Legs / Steps", f"{legs} / {steps}")
    table.add_row("Points", f"{points:,}")
    if distance_m is not None:
        table.add_row("Distance", f"{distance_m / 1000:.2f} km")
    if congestion_segments:
        table.add_row("Congestion", f"{congestion_segments} segments")
    else:
        table.add_row("Congestion", "[dim]none[/]")
    table.add_row("Updates", f"[highlight]{updates}[/]")

    console.print(Panel(table, title="[bold]Route[/]", border_style="cyan", padding=(1, 2)))


def _swatch(color) -> Text:
    r, g, b, a = color
    if a == 0:
        return Text("transparent", style="dim")
    return Text("██", style=f"rgb({r},{g},{b})") + Text(f" #{r:02x}{g:02x}{b:02x}")


def print_gradient(title: str, stops: GradientStops) -> None:
    """Print gradient stops as a table of positions and color swatches."""
    table = Table(title=title, title_style="bold", box=None, padding=(0, 2))
    table.add_column("Position", justify="right", style="fraction")
    table.add_column("Color")

    for position, color in stops.items():
        table.add_row(f"{position:.9f}", _swatch(color))
    console.print(table)


def print_completion_summary(updates: int, accepted: int, final_fraction: float,
                             completed: bool, preview: Optional[str] = None) -> None:
    """Print a styled completion summary."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Metric", style="dim")
    table.add_column("Value", style="bold green")

    table.add_row("Updates", str(updates))
    table.add_row("Accepted", str(accepted))
    table.add_row("Final Fraction", f"{final_fraction:.4f}")
    table.add_row("Route Completed", "yes" if completed else "no")
    if preview:
        table.add_row("Preview", preview)

    console.print()
    console.print(Panel(table, title="[bold green]Complete[/]", border_style="green", padding=(1, 2)))


def print_error(message: str, hint: Optional[str] = None) -> None:
    """
    Print a styled error message.

    Args:
        message: Error message
        hint: Optional hint for resolution
    """
    console.print(f"\n[error]Error:[/] {message}")
    if hint:
        console.print(f"[muted]Hint: {hint}[/]")
