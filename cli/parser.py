"""Command parser for CLI input."""

import shlex

from cli.models import (
    CommandRequest,
    PartsCommand,
    ResolveCommand,
    UploadCommand,
)


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


def parse_command(input_line: str) -> CommandRequest:
    """Parse user input into a CommandRequest object.

    Args:
        input_line: Raw user input from REPL

    Returns:
        CommandRequest object (one of Upload/Resolve/Parts)

    Raises:
        ParseError: If command syntax is invalid
    """
    if not input_line.strip():
        raise ParseError("Empty command")

    try:
        tokens = shlex.split(input_line)
    except ValueError as e:
        raise ParseError(f"Invalid syntax: {e}")

    if not tokens:
        raise ParseError("Empty command")

    command_name = tokens[0]

    if command_name == "upload":
        return _parse_upload(tokens[1:])
    elif command_name == "resolve":
        return ResolveCommand(reference=_optional_reference("resolve", tokens[1:]))
    elif command_name == "parts":
        return PartsCommand(reference=_optional_reference("parts", tokens[1:]))
    else:
        raise ParseError(f"Unknown command: {command_name}")


def _parse_upload(args: list[str]) -> UploadCommand:
    """Parse 'upload <path> [description...]' command."""
    if not args:
        raise ParseError("upload requires a file path: upload <path> [description...]")

    path = args[0]
    description = " ".join(args[1:]) or None
    return UploadCommand(path=path, description=description)


def _optional_reference(command_name: str, args: list[str]) -> str | None:
    """A reference is one token; quote it if it contains spaces."""
    if len(args) > 1:
        raise ParseError(f"{command_name} takes at most 1 argument: [reference]")
    return args[0] if args else None
