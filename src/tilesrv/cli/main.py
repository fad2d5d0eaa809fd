"""
Main CLI entry point for the tile server.

Provides commands for serving tile packages over HTTP and inspecting
their metadata.
"""

import json
import sys
from pathlib import Path
from typing import Optional

import click

from tilesrv import __version__
from tilesrv.cli.output import print_error, print_info, print_tileset_info, setup_logging
from tilesrv.core.exceptions import TilePackageError, ValidationError
from tilesrv.core.models import ServerConfig
from tilesrv.core.validation import parse_byte_size


class ByteSize(click.ParamType):
    """Click parameter type for sizes such as ``512m`` or ``1g``."""

    name = "size"

    def convert(self, value, param, ctx) -> int:
        if isinstance(value, int):
            return value
        try:
            return parse_byte_size(value)
        except ValidationError as e:
            self.fail(str(e), param, ctx)


@click.group()
@click.version_option(version=__version__, prog_name="tilesrv")
@click.option(
    "--log-level",
    envvar="TILESRV_LOG_LEVEL",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="INFO",
    show_default=True,
    help="Minimum level of log records to print.",
)
def cli(log_level: str) -> None:
    """Tile server - serve MBTiles vector and hillshade packages over HTTP.

    Tiles are cached in memory in a size-bounded LRU cache so repeated
    requests never touch the tile package.
    """
    setup_logging(log_level)


@cli.command()
@click.option("--port", envvar="TILESRV_PORT", type=int, default=8080, show_default=True,
              help="Port on which to run the server.")
@click.option("--cors", envvar="TILESRV_CORS", is_flag=True, help="Enable CORS handling.")
@click.option("--proxy", envvar="TILESRV_PROXY", is_flag=True,
              help="Enable proxy header support (when behind nginx, apache etc).")
@click.option("--zoomstack", envvar="TILESRV_ZOOMSTACK", type=click.Path(dir_okay=False, path_type=Path),
              required=True, help="Location of the vector tile package to serve.")
@click.option("--hillshade", envvar="TILESRV_HILLSHADE", type=click.Path(dir_okay=False, path_type=Path),
              help="Location of the hillshade tile package to serve.")
@click.option("--static", envvar="TILESRV_STATIC", type=click.Path(file_okay=False, path_type=Path),
              default=Path("."), show_default=True,
              help="Directory of the root static web content (index.html, style, fonts).")
@click.option("--cache", "cache_size", envvar="TILESRV_CACHE", type=ByteSize(), default="512m",
              show_default=True, help="Cache size: <INTEGER><k|m|g>, e.g. 1g or 512m.")
def serve(
    port: int,
    cors: bool,
    proxy: bool,
    zoomstack: Path,
    hillshade: Optional[Path],
    static: Path,
    cache_size: int,
) -> None:
    """Serve tile packages over HTTP.

    \b
    Examples:
        tilesrv serve --zoomstack zoomstack.mbtiles
        tilesrv serve --zoomstack vt.mbtiles --hillshade hs.mbtiles --cache 1g
        tilesrv serve --zoomstack vt.mbtiles --static ./www --cors --proxy
    """
    from tilesrv.web.app import run_server

    config = ServerConfig(
        zoomstack=zoomstack,
        port=port,
        cors=cors,
        proxy=proxy,
        hillshade=hillshade,
        static=static,
        cache_size=cache_size,
    )

    print_info(f"Serving on port {port}: {zoomstack}")

    try:
        run_server(config)
    except TilePackageError as e:
        print_error(f"Failed to load tile package: {e}")
        sys.exit(1)


@cli.command()
@click.argument("package", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Print metadata as JSON.")
def info(package: Path, as_json: bool) -> None:
    """Show the metadata of a tile package.

    \b
    Examples:
        tilesrv info zoomstack.mbtiles
        tilesrv info zoomstack.mbtiles --json
    """
    from tilesrv.sources.mbtiles import MBTilesSource

    try:
        tileset = MBTilesSource(package).info()
    except TilePackageError as e:
        print_error(str(e))
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(tileset.to_dict(), indent=2))
    else:
        print_tileset_info(str(package), tileset)


if __name__ == "__main__":
    cli()
