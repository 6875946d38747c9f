"""Upload API routes."""

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from common.logging_config import get_logger
from common.types import UploadPart
from uploader.config import DEFAULT_DESCRIPTION
from uploader.exceptions import NoPartsProvidedError
from uploader.schemas.common import ErrorResponse, UploadErrorResponse
from uploader.schemas.uploads import UploadedFileResponse, UploadResponse
from uploader.service_locator import provide_upload_service
from uploader.services.upload_service import UploadService

logger = get_logger(__name__)

router = APIRouter(prefix="/uploads", tags=["Uploads"])


@router.post(
    "",
    response_model=UploadResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        502: {"model": UploadErrorResponse},
    },
)
async def upload_parts(
    files: Optional[List[UploadFile]] = File(None),
    description: Optional[str] = Form(None),
    service: UploadService = Depends(provide_upload_service),
):
    """
    Upload already-chunked recording parts into a new secret gist.

    Parameters:
        - files: Parts in playback order (multipart/form-data, repeated "files" field)
        - description: Gist description (optional)

    Returns:
        - container_id / container_url: The new gist
        - reference: "gist_url|chunk_url_1,chunk_url_2,..." to store on the parent record
        - files: Every file in the gist with raw URL and size

    Raises:
        - 400: No files provided, or an unusable filename
        - 500: Gist credential not configured
        - 502: A remote step failed (body names the stage and part)
    """
    if not files:
        raise NoPartsProvidedError("No files provided")

    parts = []
    for upload in files:
        data = await upload.read()
        parts.append(UploadPart(filename=upload.filename or '', data=data))
        logger.info(f"Received {upload.filename}: {len(data) / 1024 / 1024:.2f}MB")

    result = await service.upload_parts(parts, description or DEFAULT_DESCRIPTION)
    reference = result.reference

    return UploadResponse(
        container_id=result.container.container_id,
        container_url=result.container.url,
        reference=reference.value,
        parts=len(reference.locators),
        files=[
            UploadedFileResponse(name=locator.filename, url=locator.url, size=locator.size)
            for locator in result.files
        ],
    )
