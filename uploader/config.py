"""Configuration settings for the upload service."""

import os
import tempfile
from typing import Optional

from uploader.exceptions import ConfigurationError


GIST_API_URL = os.environ.get("GIST_API_URL", "https://api.github.com")

GIST_GIT_HOST = os.environ.get("GIST_GIT_HOST", "gist.github.com")

GIST_BRANCH = os.environ.get("GIST_BRANCH", "main")

GIT_USER_NAME = os.environ.get("GIT_USER_NAME", "Gist Media Uploader")

GIT_USER_EMAIL = os.environ.get("GIT_USER_EMAIL", "noreply@gist-uploader.local")

GIT_POST_BUFFER_BYTES = int(os.environ.get("GIT_POST_BUFFER_BYTES", str(500 * 1024 * 1024)))

INTER_CHUNK_DELAY_SECONDS = float(os.environ.get("INTER_CHUNK_DELAY_SECONDS", "5"))

API_TIMEOUT_SECONDS = float(os.environ.get("GIST_API_TIMEOUT_SECONDS", "30"))

SCRATCH_ROOT = os.environ.get("SCRATCH_ROOT", tempfile.gettempdir())

UPLOADER_HOST = os.environ.get("UPLOADER_HOST", "0.0.0.0")

UPLOADER_PORT = int(os.environ.get("UPLOADER_PORT", "8000"))

DEFAULT_DESCRIPTION = "Video recording"


def get_step_timeout() -> Optional[float]:
    """
    Per-step deadline for network operations.

    Returns:
        Seconds from UPLOAD_STEP_TIMEOUT_SECONDS, or None for no deadline
    """
    value = os.environ.get("UPLOAD_STEP_TIMEOUT_SECONDS", "").strip()
    if not value:
        return None
    try:
        timeout = float(value)
    except ValueError:
        raise ConfigurationError(f"UPLOAD_STEP_TIMEOUT_SECONDS must be a number, got {value!r}")
    return timeout if timeout > 0 else None


def get_gist_token() -> str:
    """
    Read the gist credential from the environment.

    Returns:
        Token from GIST_KEY

    Raises:
        ConfigurationError: If GIST_KEY is unset or blank
    """
    token = os.environ.get("GIST_KEY", "").strip()
    if not token:
        raise ConfigurationError("GitHub token not configured. Please set GIST_KEY environment variable.")
    return token
