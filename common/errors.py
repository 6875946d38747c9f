"""Exception classes shared by the service and the CLI."""


class MediaUploadException(Exception):
    """
    Base exception class for all upload-pipeline errors.
    """
    pass


class ChunkingError(MediaUploadException):
    """
    Raised when a recording cannot be chunked (bad ceiling or payload).
    No remote side effects have happened when this is raised.
    """
    pass
