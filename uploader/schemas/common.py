"""Common schemas used across multiple endpoints."""

from typing import Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Response model for errors."""
    detail: str
    code: str


class UploadErrorResponse(ErrorResponse):
    """Response model for a failed upload attempt."""
    stage: str
    chunk_index: Optional[int] = None
    total_chunks: Optional[int] = None
    container_url: Optional[str] = None
