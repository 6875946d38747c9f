"""Remote container client: GitHub Gist REST API plus the gist git push protocol."""

import asyncio
import os
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

import httpx

from common.constants import MANIFEST_FILENAME
from common.logging_config import get_logger, mask_sensitive
from common.types import ChunkLocator, RemoteContainer, UploadPart
from uploader.exceptions import (
    STAGE_CLONE,
    STAGE_COMMIT,
    STAGE_CONTAINER_CREATE,
    STAGE_LIST,
    STAGE_PUSH,
    UploadError,
)
from uploader.workspace import ScratchWorkspace

logger = get_logger(__name__)


def build_manifest(description: str, parts: Sequence[UploadPart]) -> str:
    """
    Render the README placed in a new gist before any chunk is pushed.

    Args:
        description: Gist description (also used as the title)
        parts: Parts that will be committed, in order

    Returns:
        Markdown listing intended chunk names and sizes
    """
    lines = [f"# {description}", ""]
    if len(parts) > 1:
        lines.append(f"This video was split into {len(parts)} parts due to size constraints.")
        lines.append("")
    lines.append("Files:")
    for part in parts:
        lines.append(f"- {part.filename} ({part.size / 1024 / 1024:.2f}MB)")
    return "\n".join(lines)


class RemoteContainerClient(ABC):
    """
    Operations the upload orchestrator needs from the remote object host.
    """

    @abstractmethod
    async def create(self, description: str, manifest: str) -> RemoteContainer:
        """Provision a new container holding only the manifest file."""

    @abstractmethod
    async def clone_into(self, container: RemoteContainer, workspace: ScratchWorkspace) -> None:
        """Mirror the container into workspace.repo_dir, ready to push."""

    @abstractmethod
    async def commit(self, workspace: ScratchWorkspace, files: Sequence[str], message: str) -> None:
        """Stage all working-tree changes and record one commit."""

    @abstractmethod
    async def push(self, workspace: ScratchWorkspace) -> None:
        """Push committed changes to the container."""

    @abstractmethod
    async def list(self, container: RemoteContainer) -> List[ChunkLocator]:
        """Current files of the container, in the host's listing order."""

    async def commit_and_push(self, workspace: ScratchWorkspace, files: Sequence[str], message: str) -> None:
        await self.commit(workspace, files, message)
        await self.push(workspace)

    async def close(self) -> None:
        """Release transport resources."""


class GistContainerClient(RemoteContainerClient):
    """
    Secret gists as containers; git over HTTPS for pushing chunk files.
    """

    def __init__(
        self,
        token: str,
        api_url: str = "https://api.github.com",
        git_host: str = "gist.github.com",
        branch: str = "main",
        user_name: str = "Gist Media Uploader",
        user_email: str = "noreply@gist-uploader.local",
        post_buffer_bytes: int = 500 * 1024 * 1024,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
        git_binary: str = "git",
    ):
        """
        Args:
            token: GitHub token with gist scope
            api_url: REST API base URL
            git_host: Host serving gist git repositories
            branch: Remote branch pushed to
            user_name: Commit author name for the local mirror
            user_email: Commit author email for the local mirror
            post_buffer_bytes: http.postBuffer applied to each mirror
            timeout: REST request timeout in seconds
            http_client: Preconfigured client (tests inject a MockTransport here)
            git_binary: git executable
        """
        self._token = token
        self.git_host = git_host
        self.branch = branch
        self.user_name = user_name
        self.user_email = user_email
        self.post_buffer_bytes = post_buffer_bytes
        self.git_binary = git_binary
        self.session = http_client or httpx.AsyncClient(base_url=api_url, timeout=timeout)
        self._headers = {
            'Authorization': f'token {token}',
            'Accept': 'application/vnd.github+json',
        }

    def clone_url(self, container: RemoteContainer) -> str:
        return f"https://{self._token}@{self.git_host}/{container.container_id}.git"

    async def close(self) -> None:
        await self.session.aclose()

    async def create(self, description: str, manifest: str) -> RemoteContainer:
        payload = {
            'description': description,
            'public': False,
            'files': {MANIFEST_FILENAME: {'content': manifest}},
        }
        try:
            response = await self.session.post('/gists', json=payload, headers=self._headers)
        except httpx.HTTPError as e:
            raise UploadError(STAGE_CONTAINER_CREATE, f"Gist API request failed: {type(e).__name__}: {e}")

        if response.status_code not in (200, 201):
            raise UploadError(
                STAGE_CONTAINER_CREATE,
                f"Failed to create gist (status={response.status_code}): {mask_sensitive(response.text[:500])}",
            )

        data = response.json()
        container = RemoteContainer(
            container_id=data['id'],
            url=data['html_url'],
            description=description,
        )
        logger.info(f"Created gist: {container.url}")
        return container

    async def clone_into(self, container: RemoteContainer, workspace: ScratchWorkspace) -> None:
        logger.info(f"Cloning gist {container.container_id}...")
        await self._run_git(
            ['clone', self.clone_url(container), workspace.repo_dir.name],
            cwd=str(workspace.path),
            stage=STAGE_CLONE,
        )
        for key, value in (
            ('user.email', self.user_email),
            ('user.name', self.user_name),
            ('http.postBuffer', str(self.post_buffer_bytes)),
        ):
            await self._run_git(['config', key, value], cwd=str(workspace.repo_dir), stage=STAGE_CLONE)

    async def commit(self, workspace: ScratchWorkspace, files: Sequence[str], message: str) -> None:
        await self._run_git(['add', '.'], cwd=str(workspace.repo_dir), stage=STAGE_COMMIT)
        await self._run_git(['commit', '-m', message], cwd=str(workspace.repo_dir), stage=STAGE_COMMIT)

    async def push(self, workspace: ScratchWorkspace) -> None:
        await self._run_git(
            ['push', 'origin', f'HEAD:{self.branch}'],
            cwd=str(workspace.repo_dir),
            stage=STAGE_PUSH,
        )

    async def list(self, container: RemoteContainer) -> List[ChunkLocator]:
        try:
            response = await self.session.get(f'/gists/{container.container_id}', headers=self._headers)
        except httpx.HTTPError as e:
            raise UploadError(STAGE_LIST, f"Gist API request failed: {type(e).__name__}: {e}")

        if response.status_code != 200:
            raise UploadError(
                STAGE_LIST,
                f"Failed to fetch gist (status={response.status_code}): {mask_sensitive(response.text[:500])}",
            )

        files = response.json().get('files') or {}
        return [
            ChunkLocator(filename=name, url=meta.get('raw_url', ''), size=int(meta.get('size') or 0))
            for name, meta in files.items()
        ]

    async def _run_git(self, args: List[str], cwd: str, stage: str) -> str:
        """
        Run one git command, raising UploadError(stage) on a non-zero exit.

        Returns:
            Decoded stdout
        """
        command = mask_sensitive(' '.join(['git', *args]))
        logger.debug(f"Running: {command} (cwd={cwd})")

        env = dict(os.environ, GIT_TERMINAL_PROMPT='0')
        try:
            process = await asyncio.create_subprocess_exec(
                self.git_binary, *args,
                cwd=cwd,
                env=env,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise UploadError(stage, f"Could not run git: {e}")

        try:
            stdout, stderr = await process.communicate()
        except asyncio.CancelledError:
            process.kill()
            await process.wait()
            raise

        if process.returncode != 0:
            detail = mask_sensitive(stderr.decode(errors='replace').strip() or stdout.decode(errors='replace').strip())
            raise UploadError(stage, f"'{command}' exited with {process.returncode}: {detail}")

        return stdout.decode(errors='replace')
