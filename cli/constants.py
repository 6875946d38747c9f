"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

COMMANDS = ["upload", "resolve", "parts", "clear", "exit", "help"]

STYLE = Style.from_dict(
    {
        "prompt": "#6E5494 bold",
        "command": "#0088ff bold",
    }
)

PURPLE = "\033[38;2;110;84;148m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
RESET = "\033[0m"

WELCOME_TITLE = f"{PURPLE}Gist Media Uploader CLI{RESET} - chunked recordings on GitHub Gist"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

GOODBYE_TEXT = "Goodbye!"

PROMPT_TEXT = "gistnote> "

HELP_TEXT = """Available commands:
  upload <path> [description...]     Chunk a recording and upload it to a new secret gist
  resolve [reference]                Show how a stored reference or pasted link plays back
  parts [reference]                  List every part URL of a stored reference
  clear                              Clear screen and redisplay welcome message
  help                               Show this help
  exit                               Exit REPL

References look like: https://gist.github.com/<id>|<part1_url>,<part2_url>
Without a reference, resolve and parts use the last upload of this session.
Examples:
  upload recordings/intro.webm Intro for the backend role
  resolve "https://gist.github.com/abc|https://gist.githubusercontent.com/u/abc/raw/x/recording.webm"
  resolve https://www.loom.com/share/abc123"""

MEDIA_TYPES_BY_EXTENSION = {
    ".webm": "video/webm",
    ".mp4": "video/mp4",
    ".mov": "video/quicktime",
    ".m4v": "video/x-m4v",
    ".mkv": "video/x-matroska",
    ".avi": "video/x-msvideo",
    ".ogg": "audio/ogg",
}
