"""
Core Enumerations

Centralized enum definitions for consistent typing across the codebase.
Using StrEnum (Python 3.11+) for string-based enums that serialize naturally.
"""

from enum import StrEnum


class TimelineType(StrEnum):
    """Recognized timeline export schemas."""

    FILESYSTEM = "filesystem"  # mactime-style body file listing
    SUPER = "super"            # plaso super timeline (l2tcsv)
    UNKNOWN = "unknown"

    @property
    def is_known(self) -> bool:
        return self is not TimelineType.UNKNOWN
