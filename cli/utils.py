"""Utility functions for CLI operations."""

import mimetypes
from pathlib import Path

from common.constants import DEFAULT_MEDIA_TYPE
from cli.constants import MEDIA_TYPES_BY_EXTENSION


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in bytes to human-readable format with appropriate unit.

    Uses binary units (1024-based) and automatically selects the most
    appropriate unit (B, KiB, MiB, GiB, TiB).

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string with size and unit (e.g., "1.50 MiB", "512 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"

    units = ['KiB', 'MiB', 'GiB', 'TiB']
    size = size_bytes / 1024.0

    for unit in units:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0

    return f"{size:.2f} PiB"


def guess_media_type(path: Path) -> str:
    """
    Media type for a recording file, from its extension.

    Container formats where mimetypes disagrees across platforms
    (.mov, .mkv, .webm) come from MEDIA_TYPES_BY_EXTENSION first.
    """
    suffix = path.suffix.lower()
    if suffix in MEDIA_TYPES_BY_EXTENSION:
        return MEDIA_TYPES_BY_EXTENSION[suffix]
    guessed, _ = mimetypes.guess_type(path.name)
    return guessed or DEFAULT_MEDIA_TYPE


def preview_locator(path: Path) -> str:
    """file:// URL for playing a recording that could not be persisted."""
    return path.resolve().as_uri()
