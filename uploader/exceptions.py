"""Custom exception classes for the upload service."""

from typing import Optional

from common.errors import ChunkingError, MediaUploadException

__all__ = [
    "MediaUploadException",
    "ChunkingError",
    "ConfigurationError",
    "NoPartsProvidedError",
    "InvalidPartError",
    "UploadError",
    "STAGE_CONTAINER_CREATE",
    "STAGE_CLONE",
    "STAGE_COMMIT",
    "STAGE_PUSH",
    "STAGE_LIST",
]

STAGE_CONTAINER_CREATE = "container-create"
STAGE_CLONE = "clone"
STAGE_COMMIT = "commit"
STAGE_PUSH = "push"
STAGE_LIST = "list"


class ConfigurationError(MediaUploadException):
    """
    Raised when required configuration (the gist credential) is missing.
    Surfaced before any upload attempt starts.
    """
    pass


class NoPartsProvidedError(MediaUploadException):
    """
    Raised when an upload request carries zero parts.
    """
    pass


class UploadError(MediaUploadException):
    """
    Raised when a remote step of an upload attempt fails.

    Remote side effects that already happened (a created gist, chunks
    pushed before the failure) are left in place.
    """

    def __init__(
        self,
        stage: str,
        detail: str,
        chunk_index: Optional[int] = None,
        total_chunks: Optional[int] = None,
        container_url: Optional[str] = None,
    ):
        self.stage = stage
        self.detail = detail
        self.chunk_index = chunk_index
        self.total_chunks = total_chunks
        self.container_url = container_url
        super().__init__(self.describe())

    def describe(self) -> str:
        """Human-readable summary, naming the part when one was in flight."""
        if self.chunk_index is not None and self.total_chunks:
            return (
                f"Upload failed while sending part {self.chunk_index + 1} of {self.total_chunks} "
                f"({self.stage}): {self.detail}"
            )
        return f"Upload failed at {self.stage}: {self.detail}"


class InvalidPartError(MediaUploadException):
    """
    Raised when an upload part has an unusable or duplicate filename.
    """
    pass
