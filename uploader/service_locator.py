"""Service locator for the upload service used by the routes."""

from typing import AsyncIterator, Optional

from uploader import config
from uploader.container_client import GistContainerClient
from uploader.services.upload_service import UploadService

_upload_service: Optional[UploadService] = None


def set_upload_service(service: Optional[UploadService]) -> None:
    """Install a shared upload service (tests install one backed by a fake host)"""
    global _upload_service
    _upload_service = service


def get_upload_service() -> Optional[UploadService]:
    """Get the shared upload service, if one is installed"""
    return _upload_service


def build_upload_service() -> UploadService:
    """
    Build an UploadService talking to GitHub Gist.

    Raises:
        ConfigurationError: If GIST_KEY is not configured
    """
    client = GistContainerClient(
        token=config.get_gist_token(),
        api_url=config.GIST_API_URL,
        git_host=config.GIST_GIT_HOST,
        branch=config.GIST_BRANCH,
        user_name=config.GIT_USER_NAME,
        user_email=config.GIT_USER_EMAIL,
        post_buffer_bytes=config.GIT_POST_BUFFER_BYTES,
        timeout=config.API_TIMEOUT_SECONDS,
    )
    return UploadService(
        client,
        inter_chunk_delay=config.INTER_CHUNK_DELAY_SECONDS,
        step_timeout=config.get_step_timeout(),
    )


async def provide_upload_service() -> AsyncIterator[UploadService]:
    """
    FastAPI dependency yielding an UploadService for one request.

    A per-request service owns its HTTP client and closes it afterwards.
    """
    if _upload_service is not None:
        yield _upload_service
        return

    service = build_upload_service()
    try:
        yield service
    finally:
        await service.client.close()
