"""HTTP client for sending chunked recordings to the upload service."""

import time
from pathlib import Path
from typing import Optional

import httpx

from common.chunking import chunk_object
from common.errors import ChunkingError
from common.logging_config import get_logger
from common.types import BinaryObject
from cli.config import Config
from cli.constants import GREEN, RESET, YELLOW
from cli.utils import format_file_size, guess_media_type, preview_locator

logger = get_logger(__name__)


class UploadClient:
    """HTTP client for the upload service."""

    last_reference: Optional[str] = None

    def __init__(self, config: Config):
        """
        Initialize upload client.

        Args:
            config: Configuration instance
        """
        self.config = config
        self.session = httpx.Client(
            base_url=config.get_base_url(),
            timeout=config.get_timeout()
        )
        logger.info(f"Initialized UploadClient [base_url={config.get_base_url()}]")

    def _calculate_upload_timeout(self, file_size: int, parts: int) -> float:
        """
        Calculate timeout for an upload request.

        The service pushes parts one at a time and pauses between pushes,
        so the allowance grows with both size and part count.

        Args:
            file_size: Total recording size in bytes
            parts: Number of chunks

        Returns:
            Timeout in seconds (base + 0.1s per MB + per-part push allowance and delay)
        """
        base_timeout = float(self.config.get_timeout())
        size_factor = (file_size / (1024 * 1024)) * 0.1
        per_part = 30.0 + self.config.get_inter_chunk_delay()
        return base_timeout + size_factor + parts * per_part

    def _format_error(self, response: httpx.Response) -> str:
        """
        Map HTTP errors to user-friendly messages.

        Args:
            response: HTTP response object

        Returns:
            User-friendly error message
        """
        try:
            error_data = response.json()
            detail = error_data.get('detail', 'Unknown error')
            code = error_data.get('code', 'UNKNOWN')
        except ValueError:
            error_data = {}
            detail = response.text if response.text else 'Unknown error'
            code = 'UNKNOWN'

        if code == 'UPLOAD_FAILED':
            chunk_index = error_data.get('chunk_index')
            total = error_data.get('total_chunks')
            stage = error_data.get('stage', 'unknown')
            if chunk_index is not None and total:
                return f"Upload failed while sending part {chunk_index + 1} of {total} ({stage})."
            return f"Upload failed during {stage}."

        error_messages = {
            'CONFIGURATION_ERROR': 'The upload service has no gist credential configured.',
            'NO_FILES_PROVIDED': 'No files were sent.',
            'INVALID_PART': f'The service rejected a part: {detail}',
            'CHUNKING_FAILED': f'The recording could not be chunked: {detail}',
        }

        if code in error_messages:
            return error_messages[code]

        status_messages = {
            400: 'Bad request',
            413: 'Recording too large',
            422: 'Invalid request',
            500: 'Server error',
            502: 'Gist host error',
            503: 'Service unavailable',
        }

        message = status_messages.get(response.status_code, detail)
        return f"{message} (Code: {code})" if code != 'UNKNOWN' else message

    def _failure(self, path: Path, reason: str) -> str:
        """Warning shown instead of a reference when nothing was persisted."""
        return (
            f"{YELLOW}Warning: upload failed, nothing was saved to the gist host.{RESET}\n"
            f"Reason: {reason}\n"
            f"Local preview (temporary): {preview_locator(path)}"
        )

    def upload_recording(self, file_path: str, description: Optional[str] = None) -> str:
        """
        Chunk a local recording and upload all parts in one request.

        Args:
            file_path: Path to the recording
            description: Gist description (defaults to a timestamped one)

        Returns:
            Reference to store on success, or a warning with a local preview
            locator on failure (never a half-formed reference)
        """
        path = Path(file_path).expanduser()
        if not path.is_file():
            return f"Error: File not found: {file_path}"

        data = path.read_bytes()
        media_type = guess_media_type(path)
        description = description or f"Video recording - {time.strftime('%Y-%m-%dT%H:%M:%S')}"

        try:
            chunks = chunk_object(
                BinaryObject(data=data, media_type=media_type),
                base_name=f"recording-{int(time.time() * 1000)}",
                ceiling=self.config.get_chunk_size(),
            )
        except ChunkingError as e:
            return f"Error: {e}"

        noun = 'file' if len(chunks) == 1 else 'parts'
        print(f"Uploading {format_file_size(len(data))} ({len(chunks)} {noun})...")
        logger.info(f"Uploading {path.name} as {len(chunks)} chunk(s), media_type={media_type}")

        files = [('files', (chunk.filename, chunk.data, media_type)) for chunk in chunks]
        timeout = self._calculate_upload_timeout(len(data), len(chunks))

        try:
            response = self.session.post(
                '/uploads',
                files=files,
                data={'description': description},
                timeout=timeout,
            )
        except httpx.ConnectError:
            return self._failure(path, "Cannot connect to upload service. Is it running?")
        except httpx.TimeoutException:
            return self._failure(path, f"Upload timed out after {timeout:.0f}s")

        if response.status_code != 201:
            logger.warning(f"Upload failed for {path.name} status={response.status_code}")
            return self._failure(path, self._format_error(response))

        result = response.json()
        self.last_reference = result['reference']
        logger.info(f"Upload completed: {result['container_url']}")

        lines = [
            f"{GREEN}Upload complete!{RESET}",
            f"Gist page: {result['container_url']}",
            f"Parts: {result['parts']}",
            f"Reference: {result['reference']}",
        ]
        return '\n'.join(lines)

    def close(self) -> None:
        """Close the HTTP session."""
        self.session.close()
