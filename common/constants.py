"""Project-wide constants (chunk ceiling, media extensions, manifest name)."""

# Largest single push the gist git endpoint accepts reliably over HTTPS.
CHUNK_SIZE_BYTES: int = 7 * 1024 * 1024  # 7 MiB

DEFAULT_BASE_NAME = "recording"
DEFAULT_EXTENSION = "webm"
DEFAULT_MEDIA_TYPE = "video/webm"

MANIFEST_FILENAME = "README.md"

MEDIA_EXTENSIONS = (".webm", ".mp4", ".mov", ".avi", ".mkv", ".m4v", ".ogg")

REFERENCE_SEPARATOR = "|"
LOCATOR_SEPARATOR = ","

CHUNKED_HOST_PLATFORM = "chunked-host"
