"""File-backed timeline engine.

Modules:
- formats.py: schema table and header classification
- decoder.py: backslash-escaped line decoder with size limits
- sniffer.py: guarded JSON/XML pretty-printer for message fields
- line_index.py: byte offset index over data rows
- tag_store.py: tag overlay and sidecar persistence
- table.py: TimelineTable orchestrating the above
- search.py: substring row search
"""

from .decoder import parse_line
from .formats import (
    FILESYSTEM_SCHEMA,
    KNOWN_SCHEMAS,
    SUPER_SCHEMA,
    TimelineSchema,
    detect_format,
)
from .line_index import LineIndex, build_line_index
from .search import find_rows, has_match, row_matches
from .sniffer import format_if_applicable
from .table import TimelineTable
from .tag_store import TagStore, sanitize_file_name, tag_file_path

__all__ = [
    "FILESYSTEM_SCHEMA",
    "KNOWN_SCHEMAS",
    "SUPER_SCHEMA",
    "LineIndex",
    "TagStore",
    "TimelineSchema",
    "TimelineTable",
    "build_line_index",
    "detect_format",
    "find_rows",
    "format_if_applicable",
    "has_match",
    "parse_line",
    "row_matches",
    "sanitize_file_name",
    "tag_file_path",
]
