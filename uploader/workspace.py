"""Private scratch directory for one upload attempt: staged chunks plus the gist clone."""

import secrets
import shutil
from pathlib import Path
from typing import Optional

from common.logging_config import get_logger
from common.types import UploadPart

logger = get_logger(__name__)


class ScratchWorkspace:
    """
    Uniquely named temporary directory tree, removed unconditionally on exit.

    Layout:
        <root>/<prefix><32 hex>/chunks/   raw chunk files
        <root>/<prefix><32 hex>/repo/     working copy of the gist
    """

    def __init__(self, root: Optional[Path] = None, prefix: str = "gist-upload-"):
        """
        Args:
            root: Parent directory for scratch trees (defaults to SCRATCH_ROOT)
            prefix: Directory name prefix
        """
        if root is None:
            from uploader.config import SCRATCH_ROOT
            root = Path(SCRATCH_ROOT)
        self.root = Path(root)
        self.path = self.root / f"{prefix}{secrets.token_hex(16)}"
        self.chunks_dir = self.path / "chunks"
        self.repo_dir = self.path / "repo"

    def __enter__(self) -> 'ScratchWorkspace':
        self.chunks_dir.mkdir(parents=True, exist_ok=False)
        logger.debug(f"Created scratch workspace {self.path}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.cleanup()

    def cleanup(self) -> None:
        """Remove the whole tree. Errors are logged, never raised, so the original failure wins."""
        if not self.path.exists():
            return
        try:
            shutil.rmtree(self.path)
            logger.info(f"Cleaned up scratch workspace {self.path.name}")
        except OSError as e:
            logger.error(f"Failed to clean up scratch workspace {self.path}: {e}")

    def stage_part(self, part: UploadPart) -> Path:
        """
        Write a part's bytes into the chunks directory.

        Returns:
            Path of the staged file
        """
        filepath = self.chunks_dir / Path(part.filename).name
        filepath.write_bytes(part.data)
        logger.debug(f"Staged {part.filename}: {part.size / 1024 / 1024:.2f}MB")
        return filepath

    def copy_into_repo(self, filename: str) -> Path:
        """
        Copy a staged chunk into the gist working tree.

        Returns:
            Path of the copy inside the working tree
        """
        name = Path(filename).name
        destination = self.repo_dir / name
        shutil.copyfile(self.chunks_dir / name, destination)
        return destination
