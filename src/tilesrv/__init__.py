"""
Tile server

Serves pre-rendered map tiles (vector and raster hillshade) from MBTiles
packages over HTTP, with an in-memory, size-bounded LRU cache in front of
the packages.

Quick Start:
    >>> from tilesrv import LRUCache, MBTilesSource, TileResolver
    >>> resolver = TileResolver(MBTilesSource("zoomstack.mbtiles"), LRUCache(64 * 1024 * 1024))
    >>> tile = resolver.resolve("/7/63/42/tile.mvt", 7, 63, 42)
    >>> tile.found
    True
"""

__version__ = "0.1.0"

# Cache
from tilesrv.cache.lru import LRUCache

# Exceptions
from tilesrv.core.exceptions import (
    DataSourceError,
    TilePackageError,
    TileServerError,
    ValidationError,
)

# Data models
from tilesrv.core.models import (
    CacheStatus,
    ResolvedTile,
    ServerConfig,
    TileCoordinate,
    TileFormat,
    TileOrigin,
    TilesetInfo,
)
from tilesrv.core.resolver import TileResolver

# Tile sources
from tilesrv.sources.base import TileDataSource
from tilesrv.sources.mbtiles import MBTilesSource

__all__ = [
    # Version
    "__version__",
    # Cache
    "LRUCache",
    # Models
    "CacheStatus",
    "ResolvedTile",
    "ServerConfig",
    "TileCoordinate",
    "TileFormat",
    "TileOrigin",
    "TilesetInfo",
    # Core
    "TileResolver",
    "TileDataSource",
    "MBTilesSource",
    # Exceptions
    "TileServerError",
    "DataSourceError",
    "TilePackageError",
    "ValidationError",
]
