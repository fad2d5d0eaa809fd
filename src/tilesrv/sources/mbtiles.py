"""
MBTiles tile package reader.

MBTiles packages are SQLite databases with a ``tiles`` table keyed by
zoom level, column and row, and a ``metadata`` table of key/value pairs.
Packages are opened read-only.
"""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from tilesrv.core.exceptions import DataSourceError, TilePackageError
from tilesrv.core.models import BBox, Position, TilesetInfo
from tilesrv.sources.base import TileDataSource

logger = logging.getLogger(__name__)


class MBTilesSource(TileDataSource):
    """Read-only tile source backed by an MBTiles package."""

    TILE_QUERY = (
        "SELECT tile_data FROM tiles "
        "WHERE zoom_level = ? AND tile_column = ? AND tile_row = ?"
    )

    def __init__(self, path: Path):
        """Open and validate the package.

        Args:
            path: Path to the ``.mbtiles`` file.

        Raises:
            TilePackageError: If the file is missing or not a readable package.
        """
        self.path = Path(path)

        if not self.path.is_file():
            raise TilePackageError(str(self.path), "File does not exist")

        self._uri = f"{self.path.resolve().as_uri()}?mode=ro"

        # Reading the metadata doubles as the connectivity check.
        info = self.info()
        logger.info("created new MBTiles tile source: path = %s, %s", self.path, info)

    @property
    def name(self) -> str:
        return str(self.path)

    @contextmanager
    def _connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Get a read-only database connection.

        One connection per operation keeps worker threads from sharing
        a connection.

        Yields:
            sqlite3.Connection opened in read-only mode.
        """
        conn = sqlite3.connect(self._uri, uri=True)
        try:
            yield conn
        finally:
            conn.close()

    def fetch_tile(self, column: int, row: int, zoom: int) -> Optional[bytes]:
        """Query the package for a single tile.

        Args:
            column: Tile column.
            row: Tile row as stored in the package.
            zoom: Zoom level.

        Returns:
            Tile payload, or None if no tile is stored at that address.

        Raises:
            DataSourceError: If the query fails.
        """
        try:
            with self._connection() as conn:
                row_data = conn.execute(self.TILE_QUERY, (zoom, column, row)).fetchone()
        except OverflowError:
            # Address beyond SQLite's integer range; nothing can be stored there
            return None
        except sqlite3.Error as e:
            raise DataSourceError(self.name, str(e))

        if row_data is None:
            return None
        return bytes(row_data[0])

    def info(self) -> TilesetInfo:
        """Read the package metadata.

        Returns:
            TilesetInfo parsed from the ``metadata`` table.

        Raises:
            TilePackageError: If the table cannot be read or a value is malformed.
        """
        try:
            with self._connection() as conn:
                rows = conn.execute("SELECT name, value FROM metadata").fetchall()
        except sqlite3.Error as e:
            raise TilePackageError(str(self.path), str(e))

        info = TilesetInfo()

        for key, value in rows:
            if key == "name":
                info.name = value
            elif key == "format":
                info.format = value
            elif key == "minzoom":
                info.minzoom = self._parse_int(key, value)
            elif key == "maxzoom":
                info.maxzoom = self._parse_int(key, value)
            elif key == "json":
                info.json = value
            elif key == "center":
                info.center = self._parse_position(value)
            elif key == "bounds":
                info.bounds = self._parse_bbox(value)
            else:
                info.extra[key] = value

        return info

    def _parse_int(self, key: str, value: str) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            raise TilePackageError(str(self.path), f"Failed to parse {key}: {value!r}")

    def _parse_floats(self, key: str, value: str) -> list[float]:
        try:
            return [float(part.strip()) for part in str(value).split(",")]
        except ValueError:
            raise TilePackageError(str(self.path), f"Failed to parse {key}: {value!r}")

    def _parse_position(self, value: str) -> Position:
        """Parse a value such as ``-0.173,51.3859,10``."""
        parts = self._parse_floats("center", value)
        if len(parts) not in (2, 3):
            raise TilePackageError(str(self.path), f"Failed to parse center: {value!r}")
        zoom = int(parts[2]) if len(parts) == 3 else 0
        return Position(lon=parts[0], lat=parts[1], zoom=zoom)

    def _parse_bbox(self, value: str) -> BBox:
        """Parse a value such as ``-8.82,49.79,1.92,60.94``."""
        parts = self._parse_floats("bounds", value)
        if len(parts) != 4:
            raise TilePackageError(str(self.path), f"Failed to parse bounds: {value!r}")
        return BBox(*parts)
