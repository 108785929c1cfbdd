"""
Exceptions raised by the timeline engine.
"""


class TimelineError(Exception):
    """Base exception for timeline engine errors."""
    pass


class FileAccessError(TimelineError):
    """Raised when the source file is missing, unreadable, empty or too large."""
    pass


class CorruptFileError(TimelineError):
    """Raised when the source file has no header or an undecodable header."""
    pass


class PersistenceFailure(TimelineError):
    """Raised when the sidecar tag file cannot be resolved, read or written."""
    pass


class ResourceLimitExceeded(TimelineError):
    """Raised when input exceeds one of the hard safety limits."""

    def __init__(self, limit_name: str, limit: int, message: str = ""):
        self.limit_name = limit_name
        self.limit = limit
        if not message:
            message = f"{limit_name} exceeds maximum limit ({limit})"
        super().__init__(message)
