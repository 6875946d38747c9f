"""Pydantic schemas for upload and playback endpoints."""

from typing import List, Optional

from pydantic import BaseModel


class UploadedFileResponse(BaseModel):
    """One file in the gist after the upload."""
    name: str
    url: str
    size: int


class UploadResponse(BaseModel):
    """Response model for a completed upload."""
    success: bool = True
    container_id: str
    container_url: str
    reference: str
    parts: int
    files: List[UploadedFileResponse]


class PlaybackResponse(BaseModel):
    """Response model for resolving a stored voice note value."""
    url: str
    platform: Optional[str] = None
    is_valid: bool
    embed_locator: Optional[str] = None
    all_locators: List[str] = []
    part_notice: Optional[str] = None
