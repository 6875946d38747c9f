"""Command request data types for CLI."""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class UploadCommand:
    """Chunk and upload a local recording."""

    path: str
    description: str | None = None
    command: Literal["upload"] = "upload"


@dataclass(frozen=True)
class ResolveCommand:
    """Resolve a stored reference or pasted link for playback.

    A missing reference means the last one uploaded in this session.
    """

    reference: str | None = None
    command: Literal["resolve"] = "resolve"


@dataclass(frozen=True)
class PartsCommand:
    """List the part URLs of a stored reference."""

    reference: str | None = None
    command: Literal["parts"] = "parts"


CommandRequest = UploadCommand | ResolveCommand | PartsCommand
