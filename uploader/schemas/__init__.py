"""Pydantic schemas for API requests and responses."""

from uploader.schemas.common import ErrorResponse, UploadErrorResponse
from uploader.schemas.uploads import (
    PlaybackResponse,
    UploadedFileResponse,
    UploadResponse,
)

__all__ = [
    "ErrorResponse",
    "UploadErrorResponse",
    "PlaybackResponse",
    "UploadedFileResponse",
    "UploadResponse",
]
