"""Shared pytest fixtures for all tests."""

import asyncio
from typing import List, Optional, Sequence

import pytest

from cli.config import Config
from common.constants import MANIFEST_FILENAME
from common.types import ChunkLocator, RemoteContainer
from uploader.container_client import RemoteContainerClient
from uploader.exceptions import UploadError
from uploader.services.upload_service import UploadService
from uploader.workspace import ScratchWorkspace

MB = 1024 * 1024


class FakeContainerClient(RemoteContainerClient):
    """
    In-memory gist host.

    Records every call in `events`, keeps remote files in commit order, and
    can fail or hang at a chosen stage (and chunk, for commit/push).
    """

    def __init__(
        self,
        fail_stage: Optional[str] = None,
        fail_at_chunk: Optional[int] = None,
        hang_stage: Optional[str] = None,
        unexpected_stage: Optional[str] = None,
        container_id: str = "abc123",
    ):
        self.fail_stage = fail_stage
        self.fail_at_chunk = fail_at_chunk
        self.hang_stage = hang_stage
        self.unexpected_stage = unexpected_stage
        self.container_id = container_id
        self.events: List[tuple] = []
        self.remote_files: dict = {}
        self.pushed: List[str] = []
        self.workspaces: List[ScratchWorkspace] = []
        self._pending: dict = {}
        self._commits = 0
        self._pushes = 0
        self.closed = False

    async def _maybe_fail(self, stage: str, chunk: Optional[int] = None) -> None:
        if self.hang_stage == stage and (self.fail_at_chunk is None or chunk == self.fail_at_chunk):
            await asyncio.sleep(10)
        if self.unexpected_stage == stage:
            raise RuntimeError(f"simulated crash during {stage}")
        if self.fail_stage == stage and (self.fail_at_chunk is None or chunk == self.fail_at_chunk):
            raise UploadError(stage, f"simulated {stage} failure")

    async def create(self, description: str, manifest: str) -> RemoteContainer:
        self.events.append(("create", description))
        await self._maybe_fail("container-create")
        self.remote_files[MANIFEST_FILENAME] = manifest.encode()
        return RemoteContainer(
            container_id=self.container_id,
            url=f"https://gist.github.com/{self.container_id}",
            description=description,
        )

    async def clone_into(self, container: RemoteContainer, workspace: ScratchWorkspace) -> None:
        self.events.append(("clone", container.container_id))
        self.workspaces.append(workspace)
        assert workspace.path.exists()
        await self._maybe_fail("clone")
        workspace.repo_dir.mkdir()
        for name, data in self.remote_files.items():
            (workspace.repo_dir / name).write_bytes(data)

    async def commit(self, workspace: ScratchWorkspace, files: Sequence[str], message: str) -> None:
        index = self._commits
        self._commits += 1
        self.events.append(("commit", index, message))
        await self._maybe_fail("commit", index)
        for name in files:
            self._pending[name] = (workspace.repo_dir / name).read_bytes()

    async def push(self, workspace: ScratchWorkspace) -> None:
        index = self._pushes
        self._pushes += 1
        self.events.append(("push", index))
        await self._maybe_fail("push", index)
        for name, data in self._pending.items():
            self.remote_files[name] = data
            self.pushed.append(name)
        self._pending = {}

    async def list(self, container: RemoteContainer) -> List[ChunkLocator]:
        self.events.append(("list", container.container_id))
        await self._maybe_fail("list")
        return [
            ChunkLocator(
                filename=name,
                url=f"https://gist.githubusercontent.com/user/{container.container_id}/raw/{name}",
                size=len(data),
            )
            for name, data in self.remote_files.items()
        ]

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_client():
    """Fake gist host that never fails."""
    return FakeContainerClient()


@pytest.fixture
def fake_client_factory():
    """Build fake hosts with injected failures: fake_client_factory(fail_stage="push", fail_at_chunk=1)."""
    return FakeContainerClient


@pytest.fixture
def scratch_root(tmp_path):
    """
    Directory holding scratch workspaces, so tests can assert it ends up empty.
    """
    root = tmp_path / 'scratch'
    root.mkdir()
    return root


def make_service(client: FakeContainerClient, scratch_root, chunk_size: int = 7 * MB, step_timeout=None):
    """
    UploadService on a fake host whose pacing sleeps are recorded in client.events.
    """
    async def record_sleep(seconds: float) -> None:
        client.events.append(("sleep", seconds))

    return UploadService(
        client,
        chunk_size=chunk_size,
        inter_chunk_delay=5,
        step_timeout=step_timeout,
        scratch_root=scratch_root,
        sleep=record_sleep,
    )


@pytest.fixture
def temp_config_dir(tmp_path):
    """
    Create temporary config directory.

    Returns:
        Path to temporary .gistupload directory
    """
    config_dir = tmp_path / '.gistupload'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir):
    """
    Create temporary config instance.

    Returns:
        Config instance with temp config file
    """
    return Config(temp_config_dir / 'config.json')


@pytest.fixture
def sample_recording(tmp_path):
    """
    Create a small .webm recording for CLI uploads.

    Returns:
        Path to the recording
    """
    file_path = tmp_path / 'intro.webm'
    file_path.write_bytes(b'\x1a\x45\xdf\xa3' + b'\x00' * 2048)
    return file_path


@pytest.fixture
def service_factory(scratch_root):
    """
    Build an UploadService for a fake host, with scratch space under scratch_root.
    """
    def factory(client: FakeContainerClient, **kwargs) -> UploadService:
        return make_service(client, scratch_root, **kwargs)
    return factory
