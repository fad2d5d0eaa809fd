"""
Custom exceptions for the tile server.
"""


class TileServerError(Exception):
    """Base exception for all tile server errors."""

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class DataSourceError(TileServerError):
    """Raised when a tile data source fails to answer a query.

    A query that simply matches no tile is not an error; data sources
    return ``None`` for that case.
    """

    def __init__(self, source: str, details: str | None = None):
        super().__init__(f"Tile data source failed: {source}", details=details)
        self.source = source


class TilePackageError(TileServerError):
    """Raised when a tile package cannot be opened or its metadata is invalid."""

    def __init__(self, path: str, details: str | None = None):
        super().__init__(f"Invalid tile package: {path}", details=details)
        self.path = path


class ValidationError(TileServerError):
    """Raised when data validation fails."""

    def __init__(self, field: str, value: str, reason: str):
        super().__init__(
            f"Validation failed for {field}",
            details=f"Value '{value}' is invalid: {reason}",
        )
        self.field = field
        self.value = value
        self.reason = reason
