"""
Abstract base class for tile data sources.

Defines the interface the tile resolver queries on a cache miss.
"""

from abc import ABC, abstractmethod
from typing import Optional

from tilesrv.core.models import TilesetInfo


class TileDataSource(ABC):
    """Read-only source of raw tile payloads.

    Rows are passed through exactly as given; deciding which row
    convention to query is the caller's job.
    """

    @abstractmethod
    def fetch_tile(self, column: int, row: int, zoom: int) -> Optional[bytes]:
        """Fetch the payload stored at the given address.

        Args:
            column: Tile column.
            row: Tile row, in the package's own numbering.
            zoom: Zoom level.

        Returns:
            The raw payload, or None if no tile is stored there.

        Raises:
            DataSourceError: If the query itself fails.
        """
        pass

    @abstractmethod
    def info(self) -> TilesetInfo:
        """Return the tileset metadata.

        Raises:
            TilePackageError: If the metadata cannot be read or parsed.
        """
        pass

    @property
    def name(self) -> str:
        """Return a human-readable identifier for logs and errors."""
        return type(self).__name__
