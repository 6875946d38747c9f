"""Interactive prompt_toolkit session for uploading and inspecting recordings."""

import os
import sys

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import NestedCompleter, PathCompleter
from prompt_toolkit.history import FileHistory, InMemoryHistory

from common.logging_config import get_logger
from cli.commands import close_client, handle_parts, handle_resolve, handle_upload
from cli.constants import (
    COMMANDS,
    GOODBYE_TEXT,
    HELP_TEXT,
    PROMPT_TEXT,
    STYLE,
    WELCOME_HELP,
    WELCOME_TITLE,
)
from cli.models import CommandRequest, PartsCommand, ResolveCommand, UploadCommand
from cli.parser import ParseError, parse_command

logger = get_logger(__name__)


def build_completer() -> NestedCompleter:
    """Complete command names, and file paths after 'upload'."""
    commands = {name: None for name in COMMANDS}
    commands["upload"] = PathCompleter(expanduser=True)
    return NestedCompleter.from_nested_dict(commands)


def build_history():
    """Persist prompt history next to the config file when the directory is writable."""
    history_dir = os.path.expanduser("~/.gistupload")
    if os.path.isdir(history_dir) and os.access(history_dir, os.W_OK):
        return FileHistory(os.path.join(history_dir, "history"))
    return InMemoryHistory()


def clear_screen() -> None:
    os.system("cls" if sys.platform == "win32" else "clear")


def show_welcome() -> None:
    print(WELCOME_TITLE)
    print(WELCOME_HELP)


def dispatch_command(cmd_obj: CommandRequest) -> str:
    """Dispatch parsed command to appropriate handler."""
    if isinstance(cmd_obj, UploadCommand):
        return handle_upload(cmd_obj)
    if isinstance(cmd_obj, ResolveCommand):
        return handle_resolve(cmd_obj)
    if isinstance(cmd_obj, PartsCommand):
        return handle_parts(cmd_obj)
    return f"Unknown command type: {type(cmd_obj)}"


def run_line(line: str) -> str:
    """
    Parse and run one command line.

    Returns:
        Text to show the user; parse errors come back as "Error: ..."
    """
    try:
        return dispatch_command(parse_command(line))
    except ParseError as e:
        return f"Error: {e}"


def repl_loop() -> None:
    """Prompt until 'exit' or EOF; Ctrl-C abandons the current line only."""
    session: PromptSession = PromptSession(
        completer=build_completer(), history=build_history(), style=STYLE
    )

    clear_screen()
    show_welcome()

    try:
        while True:
            try:
                line = session.prompt([("class:prompt", PROMPT_TEXT)]).strip()
            except KeyboardInterrupt:
                continue
            except EOFError:
                print(f"\n{GOODBYE_TEXT}")
                break

            if not line:
                continue
            if line == "exit":
                print(GOODBYE_TEXT)
                break
            if line == "help":
                print(HELP_TEXT)
                continue
            if line == "clear":
                clear_screen()
                show_welcome()
                continue

            print(run_line(line))
    finally:
        close_client()
        logger.debug("REPL session closed")
