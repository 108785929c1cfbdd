"""Core engine for the timeline viewer (no Qt dependencies)."""

from .config import AppConfig, load_app_config  # noqa: F401
from .enums import TimelineType  # noqa: F401
from .exceptions import (  # noqa: F401
    CorruptFileError,
    FileAccessError,
    PersistenceFailure,
    ResourceLimitExceeded,
    TimelineError,
)
