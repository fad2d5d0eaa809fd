"""
CLI entry point for running tilesrv as a module.

Usage: python -m tilesrv [OPTIONS] COMMAND [ARGS]...
"""

from tilesrv.cli.main import cli

if __name__ == "__main__":
    cli()
