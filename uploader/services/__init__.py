"""Service layer for upload orchestration."""

from uploader.services.upload_service import (
    UploadAttempt,
    UploadResult,
    UploadService,
    select_media_locators,
)

__all__ = [
    "UploadAttempt",
    "UploadResult",
    "UploadService",
    "select_media_locators",
]
