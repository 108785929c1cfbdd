"""
Timeline schema table and header classification.

A header row is matched by exact, order-sensitive equality against each known
schema. Reordered, truncated or extended headers are ``TimelineType.UNKNOWN``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from core.enums import TimelineType


@dataclass(frozen=True, slots=True)
class TimelineSchema:
    """Canonical header of a recognized export plus its special columns."""

    timeline_type: TimelineType
    header: Tuple[str, ...]
    message_column: Optional[str] = None
    tag_column: Optional[str] = None

    def column_position(self, name: Optional[str]) -> Optional[int]:
        if name is None:
            return None
        return self.header.index(name)

    @property
    def message_index(self) -> Optional[int]:
        return self.column_position(self.message_column)

    @property
    def tag_index(self) -> Optional[int]:
        return self.column_position(self.tag_column)


FILESYSTEM_SCHEMA = TimelineSchema(
    timeline_type=TimelineType.FILESYSTEM,
    header=("Date", "Size", "Type", "Mode", "UID", "GID", "Meta", "File Name"),
)

SUPER_SCHEMA = TimelineSchema(
    timeline_type=TimelineType.SUPER,
    header=(
        "datetime",
        "timestamp_desc",
        "source",
        "source_long",
        "message",
        "parser",
        "display_name",
        "tag",
    ),
    message_column="message",
    tag_column="tag",
)

KNOWN_SCHEMAS: Tuple[TimelineSchema, ...] = (FILESYSTEM_SCHEMA, SUPER_SCHEMA)


def schema_for_header(header_fields: Sequence[str]) -> Optional[TimelineSchema]:
    """Return the schema whose canonical header equals ``header_fields`` exactly."""
    candidate = tuple(header_fields)
    for schema in KNOWN_SCHEMAS:
        if candidate == schema.header:
            return schema
    return None


def schema_for_type(timeline_type: TimelineType) -> Optional[TimelineSchema]:
    for schema in KNOWN_SCHEMAS:
        if schema.timeline_type is timeline_type:
            return schema
    return None


def detect_format(header_fields: Sequence[str]) -> TimelineType:
    """Classify a decoded header row."""
    schema = schema_for_header(header_fields)
    if schema is None:
        return TimelineType.UNKNOWN
    return schema.timeline_type
