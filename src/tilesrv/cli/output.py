"""
Rich terminal output helpers for CLI.

Provides functions for printing tileset metadata and messages, and for
routing log records through the Rich console.
"""

import logging

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from tilesrv.core.models import TilesetInfo

# Console instance for all output
console = Console()

# Log records go to stderr so they never mix with command output
log_console = Console(stderr=True)


def setup_logging(level: str = "INFO") -> None:
    """Send log records from every module to the Rich console.

    Args:
        level: Name of the minimum level to emit, e.g. ``INFO``.
    """
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=log_console, rich_tracebacks=True, show_path=False)],
        force=True,
    )
    # aiohttp's own access log duplicates the request log
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)


def print_tileset_info(path: str, info: TilesetInfo) -> None:
    """Print a table of tile package metadata.

    Args:
        path: Location of the package.
        info: Parsed metadata.
    """
    table = Table(
        title=f"Tile package: {path}",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold cyan",
    )

    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Value")

    table.add_row("name", info.name or "-")
    table.add_row("format", info.format or "-")
    table.add_row("zoom", f"{info.minzoom} - {info.maxzoom}")

    if info.bounds:
        b = info.bounds
        table.add_row("bounds", f"{b.left}, {b.bottom}, {b.right}, {b.top}")
    if info.center:
        c = info.center
        table.add_row("center", f"{c.lon}, {c.lat} @ z{c.zoom}")

    for key, value in sorted(info.extra.items()):
        table.add_row(key, value[:60] + "..." if len(value) > 60 else value, style="dim")

    console.print()
    console.print(table)


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[bold red]Error:[/] {message}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[cyan]Info:[/] {message}")
