"""
Input validation utilities for the tile server.

Provides parsing for configuration values and checks on path segments
taken from request URLs, to prevent path traversal when serving files.
"""

import re

from tilesrv.core.exceptions import ValidationError

KB = 1024
MB = KB * 1024
GB = MB * 1024

_UNITS = {"k": KB, "m": MB, "g": GB}

# <INTEGER><k|m|g>; anything after the unit (e.g. "512mb") is ignored
_BYTE_SIZE_PATTERN = re.compile(r"^([1-9]\d*)([kmg])", re.IGNORECASE)

# Deepest zoom level any real tile pyramid uses
MAX_ZOOM = 30


def parse_byte_size(value: str) -> int:
    """Parse a human-readable size such as ``512m`` or ``1g``.

    Args:
        value: Size string: a positive integer followed by k, m or g.

    Returns:
        Size in bytes.

    Raises:
        ValidationError: If the value does not match the expected format.
    """
    match = _BYTE_SIZE_PATTERN.match(value.strip()) if value else None
    if not match:
        raise ValidationError(
            "cache_size",
            value or "",
            "Expected format <INTEGER><k|m|g>, e.g. 1g or 512m",
        )

    return int(match.group(1)) * _UNITS[match.group(2).lower()]


def validate_path_segment(field: str, segment: str) -> str:
    """Validate a single file name taken from a URL.

    Args:
        field: Name of the value, for error messages.
        segment: The path segment to check.

    Returns:
        The unchanged segment.

    Raises:
        ValidationError: If the segment is empty, a relative reference, or
            contains separators or control characters.
    """
    if not segment:
        raise ValidationError(field, "", "Path segment cannot be empty")

    if segment in (".", ".."):
        raise ValidationError(field, segment, "Relative path references are not allowed")

    if "/" in segment or "\\" in segment:
        raise ValidationError(field, segment, "Path separators are not allowed")

    if any(ord(c) < 32 or ord(c) == 127 for c in segment):
        raise ValidationError(field, repr(segment), "Path contains invalid control characters")

    return segment
