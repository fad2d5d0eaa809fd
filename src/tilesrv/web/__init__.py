"""
HTTP layer for the tile server.

Provides the aiohttp application factory, handlers and middlewares.
"""

from tilesrv.web.app import create_app, create_app_from_config, run_server
from tilesrv.web.metrics import RequestMetrics

__all__ = [
    "create_app",
    "create_app_from_config",
    "run_server",
    "RequestMetrics",
]
