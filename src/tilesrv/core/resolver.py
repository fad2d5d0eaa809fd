"""
Tile request resolution.

Turns a tile request into a payload and fingerprint, going through the
cache first and the tile package only on a miss. Tile packages are
expected to number rows TMS-style (row 0 at the bottom) while requests
arrive XYZ-style, so the row is flipped before querying; packages that
turn out to use the request's own numbering are handled by a second
lookup with the raw row.
"""

import logging
from typing import TYPE_CHECKING

from tilesrv.core.models import ResolvedTile, TileCoordinate, TileOrigin
from tilesrv.core.validation import MAX_ZOOM

if TYPE_CHECKING:
    from tilesrv.cache.lru import LRUCache
    from tilesrv.sources.base import TileDataSource

logger = logging.getLogger(__name__)


class TileResolver:
    """Cache-aside tile lookup with row-convention fallback.

    Safe to call from many threads at once. The cache lock is never held
    while the data source is queried, so concurrent misses for the same
    key may each fetch the tile; the last one stored wins.
    """

    def __init__(self, source: "TileDataSource", cache: "LRUCache"):
        """Initialize the resolver.

        Args:
            source: Tile package to query on a cache miss.
            cache: Shared cache, keyed by request.
        """
        self.source = source
        self.cache = cache

    def resolve(self, request_key: str, zoom: int, column: int, row: int) -> ResolvedTile:
        """Resolve one tile request.

        Args:
            request_key: Value uniquely identifying the requested resource,
                typically the normalized request path.
            zoom: Zoom level.
            column: Tile column.
            row: Tile row, XYZ numbering.

        Returns:
            ResolvedTile. ``found`` is False when neither row convention
            yields a tile.

        Raises:
            DataSourceError: If the tile package query fails. No fallback
                lookup is attempted after a failed query.
        """
        cached = self.cache.get(request_key)
        if cached is not None:
            payload, fingerprint = cached
            return ResolvedTile(payload=payload, fingerprint=fingerprint, origin=TileOrigin.CACHE)

        if zoom > MAX_ZOOM:
            logger.debug("zoom out of range, tile not found: key = %s, zoom = %d", request_key, zoom)
            return ResolvedTile.not_found()

        coord = TileCoordinate(zoom=zoom, column=column, row=row)

        logger.debug(
            "handling tile request: x = %d, z = %d, y = %d, tms y = %d",
            column, zoom, row, coord.tms_row,
        )

        origin = TileOrigin.TMS_ROW
        payload = self.source.fetch_tile(column, coord.tms_row, zoom)

        if payload is None:
            origin = TileOrigin.RAW_ROW
            payload = self.source.fetch_tile(column, row, zoom)

            if payload is not None:
                logger.warning(
                    "tile was looked up as XYZ and not TMS: x = %d, z = %d, y = %d, tms y = %d",
                    column, zoom, row, coord.tms_row,
                )

        if payload is None:
            return ResolvedTile.not_found()

        fingerprint = self.cache.set(request_key, payload)
        return ResolvedTile(payload=payload, fingerprint=fingerprint, origin=origin)
