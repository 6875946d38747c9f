"""Shared data type definitions (BinaryObject, Chunk, ChunkLocator, MediaReference, etc.)."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from common.constants import LOCATOR_SEPARATOR, REFERENCE_SEPARATOR


@dataclass(frozen=True)
class BinaryObject:
    """
    Raw recording handed over by the capture side.
    """
    data: bytes
    media_type: str

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class Chunk:
    """
    One bounded slice of a BinaryObject.
    """
    index: int
    total_chunks: int
    start: int
    end: int
    filename: str
    data: bytes = field(repr=False)

    @property
    def size(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class UploadPart:
    """
    An already-chunked part as received by the upload entry point.
    """
    filename: str
    data: bytes = field(repr=False)

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class RemoteContainer:
    """
    A gist provisioned for one upload attempt.
    """
    container_id: str
    url: str
    description: str


@dataclass(frozen=True)
class ChunkLocator:
    """
    Fetchable address of one committed chunk.
    """
    filename: str
    url: str
    size: int


@dataclass(frozen=True)
class MediaReference:
    """
    Container URL plus ordered chunk locators, persisted as a single string.
    """
    container_url: str
    locators: Tuple[ChunkLocator, ...] = ()

    @property
    def locator_urls(self) -> Tuple[str, ...]:
        return tuple(locator.url for locator in self.locators)

    @property
    def value(self) -> str:
        return f"{self.container_url}{REFERENCE_SEPARATOR}{LOCATOR_SEPARATOR.join(self.locator_urls)}"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ParsedReference:
    """
    Result of decoding a persisted reference string.
    """
    container_url: str
    locator_urls: Tuple[str, ...] = ()
    is_composite: bool = False

    @property
    def is_chunked(self) -> bool:
        return len(self.locator_urls) > 1

    @property
    def first_locator(self) -> Optional[str]:
        return self.locator_urls[0] if self.locator_urls else None


@dataclass(frozen=True)
class PlaybackSource:
    """
    Renderer choice and locators for a stored voice note value.
    """
    url: str
    platform: Optional[str] = None
    is_valid: bool = False
    embed_locator: Optional[str] = None
    all_locators: Tuple[str, ...] = ()

    @property
    def part_count(self) -> int:
        return len(self.all_locators)

    def part_notice(self) -> Optional[str]:
        """Notice shown instead of auto-advancing through a multi-part recording."""
        if self.part_count > 1:
            return f"This recording has {self.part_count} parts. Playing part 1."
        return None


class UploadState(str, Enum):
    """Stages an upload attempt moves through."""
    IDLE = "idle"
    CREATING = "creating"
    CLONING = "cloning"
    COMMITTING = "committing"
    PUSHING = "pushing"
    LISTING = "listing"
    DONE = "done"
    FAILED = "failed"
