"""
Pytest fixtures and configuration for tile server tests.

Provides temporary MBTiles packages and an in-memory fake tile source.
"""

import gzip
import sqlite3
from pathlib import Path
from typing import Callable, Optional

import pytest

from tilesrv.cache.lru import LRUCache
from tilesrv.core.exceptions import DataSourceError
from tilesrv.core.models import TilesetInfo
from tilesrv.sources.base import TileDataSource

# =============================================================================
# Fake Tile Source
# =============================================================================


class FakeTileSource(TileDataSource):
    """Dictionary-backed tile source that records every query."""

    def __init__(
        self,
        tiles: Optional[dict[tuple[int, int, int], bytes]] = None,
        failing: Optional[set[tuple[int, int, int]]] = None,
    ):
        # Keys are (column, row, zoom), in the package's own row numbering
        self.tiles = dict(tiles or {})
        self.failing = set(failing or ())
        self.calls: list[tuple[int, int, int]] = []

    def fetch_tile(self, column: int, row: int, zoom: int) -> Optional[bytes]:
        self.calls.append((column, row, zoom))
        if (column, row, zoom) in self.failing:
            raise DataSourceError("fake", "disk on fire")
        return self.tiles.get((column, row, zoom))

    def info(self) -> TilesetInfo:
        return TilesetInfo(name="fake", format="pbf")


@pytest.fixture
def fake_source() -> FakeTileSource:
    """Create an empty fake tile source."""
    return FakeTileSource()


@pytest.fixture
def cache() -> LRUCache:
    """Create a 1 KB cache."""
    return LRUCache(1024)


# =============================================================================
# MBTiles Packages
# =============================================================================

DEFAULT_METADATA = {
    "name": "Zoomstack",
    "format": "pbf",
    "minzoom": "0",
    "maxzoom": "14",
    "bounds": "-8.82,49.79,1.92,60.94",
    "center": "-0.173,51.3859,10",
    "json": '{"vector_layers": []}',
    "attribution": "Contains OS data",
}


def write_mbtiles(
    path: Path,
    tiles: dict[tuple[int, int, int], bytes],
    metadata: Optional[dict[str, str]] = None,
) -> Path:
    """Write an MBTiles package.

    Args:
        path: Destination file.
        tiles: Payloads keyed by (zoom, column, row), rows TMS-numbered.
        metadata: Metadata table contents; defaults to DEFAULT_METADATA.
    """
    conn = sqlite3.connect(path)
    try:
        conn.executescript("""
            CREATE TABLE metadata (name TEXT, value TEXT);
            CREATE TABLE tiles (
                zoom_level INTEGER,
                tile_column INTEGER,
                tile_row INTEGER,
                tile_data BLOB
            );
            CREATE UNIQUE INDEX tile_index ON tiles (zoom_level, tile_column, tile_row);
        """)
        conn.executemany(
            "INSERT INTO metadata (name, value) VALUES (?, ?)",
            list((metadata if metadata is not None else DEFAULT_METADATA).items()),
        )
        conn.executemany(
            "INSERT INTO tiles (zoom_level, tile_column, tile_row, tile_data) VALUES (?, ?, ?, ?)",
            [(z, x, y, data) for (z, x, y), data in tiles.items()],
        )
        conn.commit()
    finally:
        conn.close()
    return path


@pytest.fixture
def make_mbtiles(tmp_path: Path) -> Callable[..., Path]:
    """Factory fixture writing MBTiles packages into a temporary directory."""

    def _make(
        name: str = "tiles.mbtiles",
        tiles: Optional[dict[tuple[int, int, int], bytes]] = None,
        metadata: Optional[dict[str, str]] = None,
    ) -> Path:
        return write_mbtiles(tmp_path / name, tiles or {}, metadata)

    return _make


@pytest.fixture
def vector_tile() -> bytes:
    """A gzip-compressed stand-in for a vector tile payload."""
    return gzip.compress(b"\x1a\x0b\x0a\x05water\x78\x02")


@pytest.fixture
def tmp_zoomstack(make_mbtiles, vector_tile: bytes) -> Path:
    """MBTiles package holding tile z=1 x=0 under TMS row 1 (XYZ row 0)."""
    return make_mbtiles("zoomstack.mbtiles", {(1, 0, 1): vector_tile})


@pytest.fixture
def make_source() -> type[FakeTileSource]:
    """Give tests the fake source class to build or subclass."""
    return FakeTileSource
