"""
Core data models for the tile server.

This module defines the data structures shared by the cache, the tile
resolver, the tile package readers and the HTTP layer.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class TileFormat(Enum):
    """Tile payload formats served over HTTP."""

    MVT = "mvt"  # Mapbox vector tile, stored gzip-compressed
    PNG = "png"  # Raster hillshade

    def __str__(self) -> str:
        return self.value

    @property
    def content_type(self) -> str:
        """Return the HTTP Content-Type for this format."""
        return {
            TileFormat.MVT: "application/x-protobuf",
            TileFormat.PNG: "image/png",
        }[self]

    @property
    def content_encoding(self) -> str | None:
        """Return the HTTP Content-Encoding, if the payload is pre-compressed."""
        if self == TileFormat.MVT:
            return "gzip"
        return None


class TileOrigin(Enum):
    """Where a resolved tile payload came from."""

    CACHE = "cache"
    TMS_ROW = "tms_row"  # Found under the TMS-corrected row
    RAW_ROW = "raw_row"  # Found only under the row as requested
    NOT_FOUND = "not_found"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class TileCoordinate:
    """A tile address in an XYZ pyramid (row 0 at the top)."""

    zoom: int
    column: int
    row: int

    def __str__(self) -> str:
        return f"{self.zoom}/{self.column}/{self.row}"

    @property
    def tms_row(self) -> int:
        """Return the row number flipped to the TMS convention (row 0 at the bottom)."""
        return (1 << self.zoom) - self.row - 1


@dataclass(frozen=True)
class CacheEntry:
    """One cached payload together with its content fingerprint."""

    key: str
    value: bytes
    fingerprint: str

    @property
    def size(self) -> int:
        """Return the payload size in bytes."""
        return len(self.value)


@dataclass(frozen=True)
class CacheStatus:
    """Point-in-time snapshot of a cache."""

    elements: int
    size: int
    max_size: int

    def to_dict(self) -> dict[str, int]:
        """Convert to the dictionary exposed by the status endpoint."""
        return {
            "elementCount": self.elements,
            "currentBytes": self.size,
            "maxBytes": self.max_size,
        }


@dataclass(frozen=True)
class ResolvedTile:
    """Outcome of resolving one tile request.

    A missing tile is an ordinary result (``found`` is False), not an error.
    """

    payload: bytes | None
    fingerprint: str | None
    origin: TileOrigin

    @classmethod
    def not_found(cls) -> "ResolvedTile":
        """Build the result reported when no tile exists."""
        return cls(payload=None, fingerprint=None, origin=TileOrigin.NOT_FOUND)

    @property
    def found(self) -> bool:
        """Return True if a payload was resolved."""
        return self.payload is not None

    @property
    def row_convention_mismatch(self) -> bool:
        """Return True if the tile was only found under the raw requested row."""
        return self.origin == TileOrigin.RAW_ROW


@dataclass(frozen=True)
class Position:
    """A longitude/latitude/zoom triple, e.g. a tileset's default center."""

    lon: float
    lat: float
    zoom: int = 0


@dataclass(frozen=True)
class BBox:
    """A WGS 84 bounding box: left, bottom, right, top."""

    left: float
    bottom: float
    right: float
    top: float


@dataclass
class TilesetInfo:
    """Metadata of a tile package (the MBTiles ``metadata`` table)."""

    name: str = ""
    format: str = ""
    minzoom: int = 0
    maxzoom: int = 0
    bounds: BBox | None = None
    center: Position | None = None
    json: str = ""
    extra: dict[str, str] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"tileset: {{name = {self.name}, format = {self.format}}}"

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "format": self.format,
            "minzoom": self.minzoom,
            "maxzoom": self.maxzoom,
            "bounds": (
                [self.bounds.left, self.bounds.bottom, self.bounds.right, self.bounds.top]
                if self.bounds
                else None
            ),
            "center": (
                [self.center.lon, self.center.lat, self.center.zoom]
                if self.center
                else None
            ),
            "extra": dict(self.extra),
        }


@dataclass(frozen=True)
class ServerConfig:
    """Settings for one tile server process."""

    zoomstack: Path
    port: int = 8080
    cors: bool = False
    proxy: bool = False
    hillshade: Path | None = None
    static: Path = Path(".")
    cache_size: int = 512 * 1024 * 1024
