"""Upload orchestrator: provisions a gist and pushes chunks into it one at a time."""

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Awaitable, Callable, Iterable, List, Optional, Sequence, Tuple

from common.chunking import chunk_object
from common.constants import (
    CHUNK_SIZE_BYTES,
    DEFAULT_BASE_NAME,
    MANIFEST_FILENAME,
    MEDIA_EXTENSIONS,
)
from common.logging_config import get_logger
from common.types import (
    BinaryObject,
    ChunkLocator,
    MediaReference,
    RemoteContainer,
    UploadPart,
    UploadState,
)
from uploader.config import DEFAULT_DESCRIPTION, INTER_CHUNK_DELAY_SECONDS
from uploader.container_client import RemoteContainerClient, build_manifest
from uploader.exceptions import (
    STAGE_CLONE,
    STAGE_COMMIT,
    STAGE_CONTAINER_CREATE,
    STAGE_LIST,
    STAGE_PUSH,
    InvalidPartError,
    NoPartsProvidedError,
    UploadError,
)
from uploader.workspace import ScratchWorkspace

logger = get_logger(__name__)


@dataclass
class UploadAttempt:
    """
    Progress of a single upload call: Idle -> Creating -> Cloning ->
    Committing(i) -> Pushing(i) -> Listing -> Done, or Failed from any step.
    """
    total_chunks: int
    state: UploadState = UploadState.IDLE
    history: List[Tuple[UploadState, Optional[int]]] = field(default_factory=list)
    container: Optional[RemoteContainer] = None
    workspace_path: Optional[Path] = None
    pushed_chunks: int = 0

    def transition(self, state: UploadState, chunk_index: Optional[int] = None) -> None:
        self.state = state
        self.history.append((state, chunk_index))
        if chunk_index is None:
            logger.debug(f"Upload state -> {state.value}")
        else:
            logger.debug(f"Upload state -> {state.value}({chunk_index + 1}/{self.total_chunks})")


@dataclass(frozen=True)
class UploadResult:
    """
    Outcome of a successful upload.
    """
    container: RemoteContainer
    locators: Tuple[ChunkLocator, ...]
    files: Tuple[ChunkLocator, ...]

    @property
    def reference(self) -> MediaReference:
        return MediaReference(container_url=self.container.url, locators=self.locators)


def select_media_locators(
    listing: Iterable[ChunkLocator],
    committed: Sequence[str] = (),
    container_url: Optional[str] = None,
) -> List[ChunkLocator]:
    """
    Keep media files from a container listing, dropping the manifest.

    Files committed during this attempt are media whatever their extension and
    come first, in commit order. Any other file is kept only when its suffix is
    a known media extension, in the host's listing order after them.

    Args:
        listing: Container files as returned by the host
        committed: Filenames pushed in this attempt, in part order
        container_url: Gist page URL, attached to the error on a missing part

    Returns:
        Locators of playable chunks

    Raises:
        UploadError: A committed file is absent from the listing
    """
    by_name = {}
    for locator in listing:
        by_name.setdefault(locator.filename, locator)

    missing = [name for name in committed if name not in by_name]
    if missing:
        raise UploadError(
            STAGE_LIST,
            f"Pushed file(s) missing from gist listing: {', '.join(missing)}",
            container_url=container_url,
        )

    committed_names = set(committed)
    others = [
        locator for name, locator in by_name.items()
        if name not in committed_names
        and name != MANIFEST_FILENAME
        and Path(name).suffix.lower() in MEDIA_EXTENSIONS
    ]
    return [by_name[name] for name in committed] + others


class UploadService:
    """
    Sequential, single-writer upload of chunk files into a fresh gist.

    Every call provisions a new container and a new scratch workspace; nothing
    is retried and a partially populated container is left in place on failure.
    """

    def __init__(
        self,
        client: RemoteContainerClient,
        chunk_size: int = CHUNK_SIZE_BYTES,
        inter_chunk_delay: float = INTER_CHUNK_DELAY_SECONDS,
        step_timeout: Optional[float] = None,
        scratch_root: Optional[Path] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Args:
            client: Remote container client
            chunk_size: Chunk ceiling in bytes used by upload()
            inter_chunk_delay: Seconds to wait between consecutive pushes
            step_timeout: Deadline in seconds for each network step (None = unbounded)
            scratch_root: Parent directory for scratch workspaces
            sleep: Awaitable sleep used for pacing (tests inject a recorder)
        """
        self.client = client
        self.chunk_size = chunk_size
        self.inter_chunk_delay = inter_chunk_delay
        self.step_timeout = step_timeout
        self.scratch_root = scratch_root
        self._sleep = sleep
        self.last_attempt: Optional[UploadAttempt] = None

    async def upload(
        self,
        obj: BinaryObject,
        description: str,
        base_name: str = DEFAULT_BASE_NAME,
    ) -> MediaReference:
        """
        Chunk a recording and upload it.

        Args:
            obj: Recording bytes and media type
            description: Gist description
            base_name: Filename stem for the chunks

        Returns:
            MediaReference for the new gist

        Raises:
            ChunkingError: Before any remote call, if the recording cannot be chunked
            UploadError: If any remote step fails
        """
        chunks = chunk_object(obj, base_name=base_name, ceiling=self.chunk_size)
        parts = [UploadPart(filename=chunk.filename, data=chunk.data) for chunk in chunks]
        result = await self.upload_parts(parts, description)
        return result.reference

    async def upload_parts(self, parts: Sequence[UploadPart], description: Optional[str] = None) -> UploadResult:
        """
        Upload already-chunked parts, one commit and push per part.

        Args:
            parts: Parts in playback order
            description: Gist description (defaults to DEFAULT_DESCRIPTION)

        Returns:
            UploadResult with the container, media locators and full listing

        Raises:
            NoPartsProvidedError: If parts is empty (no remote call is made)
            InvalidPartError: If a filename is unusable or repeated
            UploadError: If any remote step fails; the scratch workspace is
                already removed when this propagates
        """
        parts = list(parts)
        if not parts:
            raise NoPartsProvidedError("No files provided")
        self._validate_parts(parts)

        description = description or DEFAULT_DESCRIPTION
        total = len(parts)
        attempt = UploadAttempt(total_chunks=total)
        self.last_attempt = attempt

        total_mb = sum(part.size for part in parts) / 1024 / 1024
        logger.info(f"Uploading {total} file(s) ({total_mb:.2f}MB) to gist...")

        try:
            attempt.transition(UploadState.CREATING)
            container = await self._step(
                STAGE_CONTAINER_CREATE,
                self.client.create(description, build_manifest(description, parts)),
            )
            attempt.container = container

            try:
                with ScratchWorkspace(self.scratch_root) as workspace:
                    attempt.workspace_path = workspace.path
                    for part in parts:
                        workspace.stage_part(part)

                    attempt.transition(UploadState.CLONING)
                    await self._step(STAGE_CLONE, self.client.clone_into(container, workspace), container=container)

                    for index, part in enumerate(parts):
                        await self._send_part(attempt, workspace, container, index, part)

                        if index < total - 1:
                            logger.info(f"Waiting {self.inter_chunk_delay:g} seconds before next chunk...")
                            await self._sleep(self.inter_chunk_delay)
            except OSError as e:
                raise UploadError(STAGE_CLONE, f"Could not prepare scratch workspace: {e}",
                                  total_chunks=total, container_url=container.url) from e

            attempt.transition(UploadState.LISTING)
            listing = await self._step(STAGE_LIST, self.client.list(container), container=container)
            locators = select_media_locators(listing, [part.filename for part in parts], container.url)

        except Exception as e:
            attempt.transition(UploadState.FAILED, attempt.history[-1][1] if attempt.history else None)
            if attempt.container is not None:
                logger.error(
                    f"Upload failed after {attempt.pushed_chunks}/{total} chunk(s); "
                    f"gist left for inspection at {attempt.container.url}: {e}"
                )
            else:
                logger.error(f"Upload failed before a gist was created: {e}")
            raise

        attempt.transition(UploadState.DONE)
        logger.info(f"Successfully uploaded {total} chunk(s) to {container.url}")

        return UploadResult(container=container, locators=tuple(locators), files=tuple(listing))

    async def _send_part(
        self,
        attempt: UploadAttempt,
        workspace: ScratchWorkspace,
        container: RemoteContainer,
        index: int,
        part: UploadPart,
    ) -> None:
        total = attempt.total_chunks
        logger.info(f"Processing chunk {index + 1}/{total}: {part.filename} ({part.size / 1024 / 1024:.2f}MB)")

        attempt.transition(UploadState.COMMITTING, index)
        try:
            workspace.copy_into_repo(part.filename)
        except OSError as e:
            raise UploadError(STAGE_COMMIT, f"Could not copy {part.filename} into the working tree: {e}",
                              chunk_index=index, total_chunks=total, container_url=container.url) from e

        message = f"Add chunk {index + 1}/{total}: {part.filename}"
        await self._step(STAGE_COMMIT, self.client.commit(workspace, [part.filename], message),
                         chunk_index=index, total_chunks=total, container=container)

        attempt.transition(UploadState.PUSHING, index)
        logger.info(f"Pushing chunk {index + 1}/{total} to gist...")
        await self._step(STAGE_PUSH, self.client.push(workspace),
                         chunk_index=index, total_chunks=total, container=container)

        attempt.pushed_chunks += 1
        logger.info(f"Chunk {index + 1}/{total} uploaded successfully")

    async def _step(
        self,
        stage: str,
        operation: Awaitable,
        chunk_index: Optional[int] = None,
        total_chunks: Optional[int] = None,
        container: Optional[RemoteContainer] = None,
    ):
        """
        Await one network operation under the step deadline.

        Timeouts and unexpected exceptions become UploadError for `stage`;
        UploadErrors from the client get the chunk position attached.
        """
        container_url = container.url if container else None
        try:
            if self.step_timeout:
                return await asyncio.wait_for(operation, timeout=self.step_timeout)
            return await operation
        except UploadError as e:
            raise UploadError(e.stage, e.detail, chunk_index=chunk_index,
                              total_chunks=total_chunks, container_url=container_url) from e
        except asyncio.TimeoutError as e:
            raise UploadError(stage, f"Timed out after {self.step_timeout:g}s", chunk_index=chunk_index,
                              total_chunks=total_chunks, container_url=container_url) from e
        except Exception as e:
            raise UploadError(stage, f"{type(e).__name__}: {e}", chunk_index=chunk_index,
                              total_chunks=total_chunks, container_url=container_url) from e

    @staticmethod
    def _validate_parts(parts: Sequence[UploadPart]) -> None:
        seen = set()
        for part in parts:
            name = part.filename or ''
            if not name or Path(name).name != name or name in ('.', '..') or name == MANIFEST_FILENAME:
                raise InvalidPartError(f"Invalid part filename: {name!r}")
            if name in seen:
                raise InvalidPartError(f"Duplicate part filename: {name!r}")
            seen.add(name)
