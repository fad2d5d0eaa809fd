"""
aiohttp application factory.

Wires the cache, tile resolvers, handlers and middlewares into a
runnable application.
"""

import logging
from pathlib import Path
from typing import Optional

from aiohttp import web

from tilesrv.cache.lru import LRUCache
from tilesrv.core.models import ServerConfig, TileFormat
from tilesrv.core.resolver import TileResolver
from tilesrv.sources.base import TileDataSource
from tilesrv.sources.mbtiles import MBTilesSource
from tilesrv.web.handlers import (
    make_font_handler,
    make_index_handler,
    make_status_handler,
    make_tile_handler,
)
from tilesrv.web.metrics import RequestMetrics
from tilesrv.web.middleware import (
    METRICS_KEY,
    add_clacks_header,
    add_cors_headers,
    cors_preflight_middleware,
    proxy_headers_middleware,
    request_logging_middleware,
)

logger = logging.getLogger(__name__)

NAME = r"{name:[A-Za-z0-9_]+}"
ZXY = r"{z:[0-9]+}/{x:[0-9]+}/{y:[0-9]+}"

SHUTDOWN_TIMEOUT = 5.0


def _add_tile_routes(
    app: web.Application,
    source: TileDataSource,
    cache: LRUCache,
    filename: str,
    tile_format: TileFormat,
) -> None:
    handler = make_tile_handler(TileResolver(source, cache), tile_format)
    app.router.add_get(f"/{NAME}/{ZXY}/{filename}", handler)
    app.router.add_get(f"/{ZXY}/{filename}", handler)


def create_app(
    cache: LRUCache,
    zoomstack: TileDataSource,
    hillshade: Optional[TileDataSource] = None,
    static: Optional[Path] = None,
    cors: bool = False,
    proxy: bool = False,
) -> web.Application:
    """Build the tile server application.

    Args:
        cache: Cache shared by every tile route.
        zoomstack: Vector tile source, served as ``tile.mvt``.
        hillshade: Optional raster hillshade source, served as ``hs.png``.
        static: Directory of static web content; fonts live in its
            ``fonts`` subdirectory.
        cors: Whether to answer cross-origin requests.
        proxy: Whether to trust reverse-proxy forwarding headers.

    Returns:
        Configured aiohttp application.
    """
    middlewares = []
    if proxy:
        logger.info("enabled proxy support")
        middlewares.append(proxy_headers_middleware)
    middlewares.append(request_logging_middleware)
    if cors:
        logger.info("enabled CORS support")
        middlewares.append(cors_preflight_middleware)

    app = web.Application(middlewares=middlewares)

    metrics = RequestMetrics()
    app[METRICS_KEY] = metrics

    app.on_response_prepare.append(add_clacks_header)
    if cors:
        app.on_response_prepare.append(add_cors_headers)

    app.router.add_get("/status", make_status_handler(metrics, cache))

    _add_tile_routes(app, zoomstack, cache, "tile.mvt", TileFormat.MVT)
    if hillshade is not None:
        _add_tile_routes(app, hillshade, cache, "hs.png", TileFormat.PNG)

    if static is not None:
        app.router.add_get("/fonts/{stack}/{file}", make_font_handler(static / "fonts"))
        app.router.add_get("/", make_index_handler(static))
        if static.is_dir():
            app.router.add_static("/", static)
        else:
            logger.warning("static directory does not exist, not serving static files: path = %s", static)

    return app


def create_app_from_config(config: ServerConfig) -> web.Application:
    """Load the configured tile packages and build the application.

    Raises:
        TilePackageError: If a tile package cannot be opened.
    """
    cache = LRUCache(config.cache_size)

    zoomstack = MBTilesSource(config.zoomstack)
    logger.info("loaded MBTiles package: path = %s, info = %s", config.zoomstack, zoomstack.info())

    hillshade = None
    if config.hillshade is not None:
        hillshade = MBTilesSource(config.hillshade)
        logger.info("loaded MBTiles package: path = %s, info = %s", config.hillshade, hillshade.info())

    return create_app(
        cache,
        zoomstack,
        hillshade=hillshade,
        static=config.static,
        cors=config.cors,
        proxy=config.proxy,
    )


def run_server(config: ServerConfig) -> None:
    """Run the server until interrupted by SIGINT or SIGTERM."""
    app = create_app_from_config(config)
    logger.info("starting server: port = %d", config.port)
    web.run_app(
        app,
        port=config.port,
        shutdown_timeout=SHUTDOWN_TIMEOUT,
        print=None,
        access_log=None,
    )
    logger.info("server closed")
