"""
Core module for the tile server.

Contains data models, the tile resolver, validation and exceptions.
"""

from tilesrv.core.exceptions import (
    DataSourceError,
    TilePackageError,
    TileServerError,
    ValidationError,
)
from tilesrv.core.models import (
    BBox,
    CacheEntry,
    CacheStatus,
    Position,
    ResolvedTile,
    ServerConfig,
    TileCoordinate,
    TileFormat,
    TileOrigin,
    TilesetInfo,
)
from tilesrv.core.resolver import TileResolver

__all__ = [
    # Models
    "BBox",
    "CacheEntry",
    "CacheStatus",
    "Position",
    "ResolvedTile",
    "ServerConfig",
    "TileCoordinate",
    "TileFormat",
    "TileOrigin",
    "TilesetInfo",
    # Core
    "TileResolver",
    # Exceptions
    "TileServerError",
    "DataSourceError",
    "TilePackageError",
    "ValidationError",
]
