"""Command handler functions for CLI operations."""

from pathlib import Path
from typing import Optional

from common.logging_config import get_logger
from common.playback import resolve_playback
from common.reference import decode_reference
from cli.config import Config
from cli.models import PartsCommand, ResolveCommand, UploadCommand
from cli.upload_client import UploadClient

logger = get_logger(__name__)

NO_REFERENCE_MESSAGE = "No reference given and nothing uploaded yet in this session."

_client: Optional[UploadClient] = None
_last_reference: Optional[str] = None


def get_client() -> UploadClient:
    """
    Get or create global UploadClient instance.

    Returns:
        UploadClient instance
    """
    global _client
    if _client is None:
        logger.debug("Creating new UploadClient instance")
        config = Config(Path.home() / '.gistupload' / 'config.json')
        _client = UploadClient(config)
    return _client


def close_client() -> None:
    """Close the global UploadClient, if one was created."""
    global _client
    if _client is not None:
        _client.close()
        _client = None


def last_reference() -> Optional[str]:
    """Reference produced by the most recent successful upload in this session."""
    return _last_reference


def _target(reference: Optional[str]) -> Optional[str]:
    return reference if reference else _last_reference


def handle_upload(cmd: UploadCommand, client: Optional[UploadClient] = None) -> str:
    """
    Handle 'upload' command.

    Args:
        cmd: UploadCommand with path and optional description
        client: Optional UploadClient for dependency injection (testing)

    Returns:
        Reference on success, or a warning with a local preview locator
    """
    global _last_reference
    logger.info(f"Executing upload command: path={cmd.path}")
    if client is None:
        client = get_client()

    previous = client.last_reference
    result = client.upload_recording(cmd.path, cmd.description)
    if client.last_reference and client.last_reference != previous:
        _last_reference = client.last_reference
    return result


def handle_resolve(cmd: ResolveCommand) -> str:
    """
    Handle 'resolve' command. Pure: no network access.

    Args:
        cmd: ResolveCommand with the stored value (None for the last upload)

    Returns:
        Platform and playable locator, or a note that nothing can be played
    """
    reference = _target(cmd.reference)
    if reference is None:
        return NO_REFERENCE_MESSAGE

    source = resolve_playback(reference)
    if not source.is_valid:
        return "Not a playable link or reference."

    lines = [
        f"Platform: {source.platform}",
        f"Play: {source.embed_locator}",
    ]
    if source.url and source.url != source.embed_locator:
        lines.append(f"View original: {source.url}")
    notice = source.part_notice()
    if notice:
        lines.append(notice)
    return '\n'.join(lines)


def handle_parts(cmd: PartsCommand) -> str:
    reference = _target(cmd.reference)
    if reference is None:
        return NO_REFERENCE_MESSAGE

    parsed = decode_reference(reference)
    if not parsed.locator_urls:
        return "No parts found in reference."

    output = [f"Gist: {parsed.container_url}", f"{len(parsed.locator_urls)} part(s):"]
    for index, url in enumerate(parsed.locator_urls, start=1):
        output.append(f"  {index}. {url}")
    return '\n'.join(output)
