"""Splits a recording into bounded, deterministically named chunks."""

import math
from typing import Iterable, List

from common.constants import CHUNK_SIZE_BYTES, DEFAULT_BASE_NAME, DEFAULT_EXTENSION
from common.errors import ChunkingError
from common.logging_config import get_logger
from common.types import BinaryObject, Chunk

logger = get_logger(__name__)


def extension_for(media_type: str) -> str:
    """
    Derive a file extension from a media type.

    Args:
        media_type: MIME type such as "video/webm;codecs=vp8,opus"

    Returns:
        Subtype with parameters stripped (e.g., "webm"), or the default
        extension when the media type has no subtype
    """
    subtype = media_type.split('/', 1)[1] if '/' in (media_type or '') else ''
    extension = subtype.split(';', 1)[0].strip().lower()
    return extension or DEFAULT_EXTENSION


def chunk_count(size: int, ceiling: int) -> int:
    """
    Number of chunks for an object of the given size (at least 1).

    Raises:
        ChunkingError: If ceiling is not positive or size is negative
    """
    if ceiling <= 0:
        raise ChunkingError(f"Chunk ceiling must be positive, got {ceiling}")
    if size < 0:
        raise ChunkingError(f"Object size cannot be negative, got {size}")
    return max(1, math.ceil(size / ceiling))


def chunk_filename(base_name: str, extension: str, index: int, total: int) -> str:
    """Filename for chunk `index` of `total`; single chunks carry no part suffix."""
    if total == 1:
        return f"{base_name}.{extension}"
    return f"{base_name}-part{index + 1}of{total}.{extension}"


def chunk_object(
    obj: BinaryObject,
    base_name: str = DEFAULT_BASE_NAME,
    ceiling: int = CHUNK_SIZE_BYTES,
) -> List[Chunk]:
    """
    Split a binary object into ordered chunks of at most `ceiling` bytes.

    An empty object still produces exactly one zero-length chunk.

    Args:
        obj: Recording to split
        base_name: Filename stem shared by all chunks
        ceiling: Maximum chunk size in bytes

    Returns:
        Chunks in index order

    Raises:
        ChunkingError: If the ceiling is not positive or the payload is not bytes
    """
    if not isinstance(obj.data, (bytes, bytearray, memoryview)):
        raise ChunkingError(f"Recording payload must be bytes, got {type(obj.data).__name__}")
    if not base_name:
        raise ChunkingError("Base filename cannot be empty")

    data = bytes(obj.data)
    size = len(data)
    total = chunk_count(size, ceiling)
    extension = extension_for(obj.media_type)

    logger.debug(f"Chunking {size / 1024 / 1024:.2f}MB recording into {total} chunk(s)")

    chunks = []
    for index in range(total):
        start = index * ceiling
        end = min(start + ceiling, size)
        chunks.append(Chunk(
            index=index,
            total_chunks=total,
            start=start,
            end=end,
            filename=chunk_filename(base_name, extension, index, total),
            data=data[start:end],
        ))

    return chunks


def reassemble(chunks: Iterable[Chunk]) -> bytes:
    """Concatenate chunk payloads in index order."""
    return b''.join(chunk.data for chunk in sorted(chunks, key=lambda c: c.index))
