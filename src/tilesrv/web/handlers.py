"""
HTTP request handlers.

Handlers are built by factory functions so each route gets its own
resolver, tile format or directory without global state.
"""

import asyncio
import logging
from pathlib import Path
from typing import Awaitable, Callable

from aiohttp import web

from tilesrv.cache.lru import LRUCache
from tilesrv.core.exceptions import DataSourceError, ValidationError
from tilesrv.core.models import ResolvedTile, TileFormat
from tilesrv.core.resolver import TileResolver
from tilesrv.core.validation import validate_path_segment
from tilesrv.web.metrics import RequestMetrics

logger = logging.getLogger(__name__)

HandlerFunc = Callable[[web.Request], Awaitable[web.StreamResponse]]


def _etag_matches(request: web.Request, fingerprint: str) -> bool:
    """Check the request's If-None-Match header against a fingerprint."""
    etags = request.if_none_match
    if not etags:
        return False
    return any(etag.value in (fingerprint, "*") for etag in etags)


def _tile_response(request: web.Request, tile: ResolvedTile, tile_format: TileFormat) -> web.Response:
    if _etag_matches(request, tile.fingerprint):
        response = web.Response(status=304)
        response.etag = tile.fingerprint
        return response

    response = web.Response(
        body=tile.payload,
        status=200,
        content_type=tile_format.content_type,
    )
    response.etag = tile.fingerprint
    if tile_format.content_encoding:
        response.headers["Content-Encoding"] = tile_format.content_encoding
    return response


def make_tile_handler(resolver: TileResolver, tile_format: TileFormat) -> HandlerFunc:
    """Build a handler serving tiles of one format from one resolver.

    Args:
        resolver: Resolver for the tile package behind this route.
        tile_format: Format of the package's payloads.

    Returns:
        aiohttp handler coroutine.
    """

    async def handle_tile(request: web.Request) -> web.Response:
        try:
            z = int(request.match_info["z"])
            x = int(request.match_info["x"])
            y = int(request.match_info["y"])
        except ValueError:
            # Past the interpreter's digit limit for int()
            return web.Response(status=404)

        loop = asyncio.get_running_loop()
        try:
            tile = await loop.run_in_executor(
                None, resolver.resolve, request.rel_url.path, z, x, y
            )
        except DataSourceError as e:
            logger.error("failed to fetch tile from datasource: error = %s", e)
            return web.Response(status=500)

        if not tile.found:
            return web.Response(status=404)

        return _tile_response(request, tile, tile_format)

    return handle_tile


def make_status_handler(metrics: RequestMetrics, cache: LRUCache) -> HandlerFunc:
    """Build the monitoring handler reporting request metrics and cache status."""

    async def handle_status(request: web.Request) -> web.Response:
        body = metrics.to_dict()
        body["cache"] = cache.status().to_dict()
        return web.json_response(body)

    return handle_status


def make_font_handler(fonts_dir: Path) -> HandlerFunc:
    """Build a handler serving PBF glyph files.

    Fonts are laid out as ``<fonts_dir>/<font name>/<range>.pbf``. A
    request for a comma-separated font stack is answered from the first
    font in the stack.
    """

    async def handle_font(request: web.Request) -> web.Response:
        stack = request.match_info["stack"]
        file = request.match_info["file"]

        if not file.endswith("pbf"):
            return web.Response(status=404)

        font = stack.split(",")[0].strip()

        try:
            validate_path_segment("font", font)
            validate_path_segment("file", file)
        except ValidationError as e:
            logger.info("rejected font request: %s", e)
            return web.Response(status=404)

        path = fonts_dir / font / file
        loop = asyncio.get_running_loop()

        try:
            data = await loop.run_in_executor(None, path.read_bytes)
        except FileNotFoundError:
            return web.Response(status=404)
        except OSError as e:
            logger.error("failed to open font path: requested font = %s, file = %s, error = %s", font, file, e)
            return web.Response(status=500)

        return web.Response(body=data, content_type="application/x-protobuf")

    return handle_font


def make_index_handler(static_dir: Path) -> HandlerFunc:
    """Build the handler serving ``index.html`` at the site root."""

    async def handle_index(request: web.Request) -> web.StreamResponse:
        index = static_dir / "index.html"
        if not index.is_file():
            return web.Response(status=404)
        return web.FileResponse(index)

    return handle_index
