"""
Tile data sources.

Readers that answer zoom/column/row queries with raw tile bytes.
"""

from tilesrv.sources.base import TileDataSource
from tilesrv.sources.mbtiles import MBTilesSource

__all__ = [
    "TileDataSource",
    "MBTilesSource",
]
