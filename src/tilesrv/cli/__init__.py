"""
Command-line interface for the tile server.

Provides Click-based CLI commands for serving and inspecting tile packages.
"""

from tilesrv.cli.main import cli

__all__ = ["cli"]
