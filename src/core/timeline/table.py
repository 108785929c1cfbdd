"""
File-backed timeline table.

``TimelineTable`` opens a timeline export read-only, indexes the start of every
data row and serves individual cells on demand. Nothing but the row offsets and
the tag overlay is held in memory; each cell read is one seek plus one line read
under a lock shared by every read on the same table.
"""
from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import BinaryIO, FrozenSet, List, Optional, Tuple, Union

from core.enums import TimelineType
from core.exceptions import (
    CorruptFileError,
    FileAccessError,
    ResourceLimitExceeded,
)
from core.logging import get_logger

from .decoder import parse_line
from .formats import TimelineSchema, schema_for_header
from .line_index import MAX_FILE_SIZE, LineIndex, build_line_index
from .sniffer import format_if_applicable
from .tag_store import TagListener, TagStore

LOGGER = get_logger("core.timeline.table")

CellValue = Union[str, bool, None]


class TimelineTable:
    """
    Random-access view over one timeline export.

    Construction either yields a fully usable table or raises; a failed
    construction never leaves an open handle behind.

    Raises (from ``__init__``):
        FileAccessError: missing, non-regular, unreadable, empty or oversized file
        ResourceLimitExceeded: row count or index memory over the limits
        CorruptFileError: missing or undecodable header
    """

    def __init__(self, path: Union[str, Path], data_dir: Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        self._handle: Optional[BinaryIO] = None

        self._check_source()
        self._handle = self._open()
        try:
            result = build_line_index(self._handle)
            self.columns, self.schema = self._read_header(result.header)
            self._index: LineIndex = result.index
            self.timeline_type = self.schema.timeline_type if self.schema else TimelineType.UNKNOWN
            self._tags = TagStore(self.path, len(self._index), data_dir)
            self._tags.load()
        except Exception:
            self.close()
            raise

        LOGGER.info(
            "Opened %s: %s timeline, %d rows, %d columns",
            self.path.name, self.timeline_type, self.row_count, self.column_count,
        )

    # Construction helpers

    def _check_source(self) -> None:
        if not self.path.exists():
            raise FileAccessError(f"File does not exist: {self.path}")
        if not self.path.is_file():
            raise FileAccessError(f"Not a regular file: {self.path}")
        if not os.access(self.path, os.R_OK):
            raise FileAccessError(f"File is not readable: {self.path}")
        size = self.path.stat().st_size
        if size == 0:
            raise FileAccessError(f"File is empty: {self.path}")
        if size > MAX_FILE_SIZE:
            raise FileAccessError(f"File size exceeds maximum limit (2GB): {self.path}")

    def _open(self) -> BinaryIO:
        try:
            return self.path.open("rb")
        except OSError as exc:
            raise FileAccessError(f"Failed to open file for reading: {exc}") from exc

    @staticmethod
    def _read_header(raw: bytes) -> Tuple[List[str], Optional[TimelineSchema]]:
        try:
            # utf-8-sig drops a leading byte order mark if present
            text = raw.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise CorruptFileError(f"Header line is not valid UTF-8: {exc}") from exc
        columns = parse_line(text)
        return columns, schema_for_header(columns)

    # Shape

    @property
    def row_count(self) -> int:
        return len(self._index)

    @property
    def column_count(self) -> int:
        return len(self.columns)

    def column_index(self, name: str) -> int:
        """Position of column ``name``, or -1 if the header has no such column."""
        try:
            return self.columns.index(name)
        except ValueError:
            return -1

    @property
    def message_column(self) -> Optional[int]:
        return self.schema.message_index if self.schema else None

    @property
    def tag_column(self) -> Optional[int]:
        return self.schema.tag_index if self.schema else None

    # Cells

    def get_cell(self, row: int, col: int) -> CellValue:
        """
        Return the value at (``row``, ``col``).

        The Super schema's tag column yields the row's tag state as a bool and
        its message column is pretty-printed when it holds JSON or XML.
        Out-of-range coordinates and undecodable lines yield None.
        """
        if not (0 <= row < self.row_count and 0 <= col < self.column_count):
            return None
        if col == self.tag_column:
            return self._tags.is_tagged(row)

        fields = self.get_row(row)
        if fields is None:
            return None
        return self._display_value(row, col, fields)

    def get_display_row(self, row: int) -> Optional[List[CellValue]]:
        """Every cell of ``row`` as ``get_cell`` would return it, from a single read."""
        fields = self.get_row(row)
        if fields is None:
            return None
        return [self._display_value(row, col, fields) for col in range(self.column_count)]

    def _display_value(self, row: int, col: int, fields: List[str]) -> CellValue:
        if col == self.tag_column:
            return self._tags.is_tagged(row)
        if col >= len(fields):
            return None
        value = fields[col]
        if col == self.message_column:
            return format_if_applicable(value)
        return value

    def get_row(self, row: int) -> Optional[List[str]]:
        """Decode every raw field of ``row``; None if out of range or undecodable."""
        if not 0 <= row < self.row_count:
            return None

        with self._lock:
            try:
                if self._handle is None or self._handle.closed:
                    self._handle = self.path.open("rb")
                self._handle.seek(self._index[row])
                raw = self._handle.readline()
            except OSError as exc:
                LOGGER.warning("Failed to read row %d of %s: %s", row, self.path.name, exc)
                return None

        try:
            return parse_line(raw.strip().decode("utf-8"))
        except (UnicodeDecodeError, ResourceLimitExceeded) as exc:
            LOGGER.warning("Error decoding row %d of %s: %s", row, self.path.name, exc)
            return None

    # Tags

    @property
    def dirty(self) -> bool:
        return self._tags.dirty

    def is_tagged(self, row: int) -> bool:
        return self._tags.is_tagged(row)

    def tagged_rows(self) -> FrozenSet[int]:
        return self._tags.tagged_rows()

    def set_tag(self, row: int, tagged: bool) -> bool:
        """Tag or untag ``row``; returns True if the overlay changed."""
        if not 0 <= row < self.row_count:
            LOGGER.debug("Ignoring tag change for out-of-range row %d", row)
            return False
        return self._tags.toggle(row, tagged)

    def subscribe(self, listener: TagListener) -> None:
        """Register ``listener(row, dirty)``; ``row`` is None after a save."""
        self._tags.subscribe(listener)

    def unsubscribe(self, listener: TagListener) -> None:
        self._tags.unsubscribe(listener)

    def save(self) -> bool:
        return self._tags.save()

    @property
    def tag_file(self) -> Path:
        return self._tags.path

    # Lifecycle

    def close(self) -> None:
        with self._lock:
            if self._handle is not None:
                self._handle.close()
                self._handle = None

    def __enter__(self) -> "TimelineTable":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"TimelineTable({str(self.path)!r}, type={self.timeline_type}, rows={self.row_count})"
