"""
Byte-offset index over the data rows of a timeline file.

The index is built in one sequential pass and never modified afterwards.
Offsets are exact byte positions in the file, so a row is read back with a
single seek followed by a single ``readline``.
"""
from __future__ import annotations

import os
from array import array
from dataclasses import dataclass
from typing import BinaryIO, Iterator

from core.exceptions import CorruptFileError, ResourceLimitExceeded
from core.logging import get_logger

LOGGER = get_logger("core.timeline.line_index")

MAX_FILE_SIZE = 2 * 1024 * 1024 * 1024      # 2 GiB
MAX_ROW_COUNT = 10_000_000
MAX_INDEX_MEMORY = 500 * 1024 * 1024         # 500 MiB of offsets
OFFSET_WIDTH = 8                             # bytes per stored offset


class LineIndex:
    """Immutable sequence of row start offsets."""

    __slots__ = ("_offsets",)

    def __init__(self, offsets: array) -> None:
        self._offsets = offsets

    def __len__(self) -> int:
        return len(self._offsets)

    def __getitem__(self, row: int) -> int:
        if row < 0:
            raise IndexError(row)
        return self._offsets[row]

    def __iter__(self) -> Iterator[int]:
        return iter(self._offsets)

    @property
    def memory_bytes(self) -> int:
        return len(self._offsets) * OFFSET_WIDTH


@dataclass(frozen=True, slots=True)
class IndexResult:
    """Outcome of an index build: the raw header line and the row offsets."""

    header: bytes
    index: LineIndex


def build_line_index(
    handle: BinaryIO,
    *,
    max_file_size: int = MAX_FILE_SIZE,
    max_rows: int = MAX_ROW_COUNT,
    max_index_memory: int = MAX_INDEX_MEMORY,
) -> IndexResult:
    """
    Scan ``handle`` from the start and record where each data row begins.

    Args:
        handle: File opened in binary mode
        max_file_size: Largest accepted file size in bytes
        max_rows: Largest accepted number of data rows
        max_index_memory: Largest accepted index size in bytes

    Returns:
        IndexResult with the header line (separator stripped) and the index

    Raises:
        ResourceLimitExceeded: file size, row count or index memory over the limit
        CorruptFileError: the file has no header line
    """
    size = os.fstat(handle.fileno()).st_size
    if size > max_file_size:
        raise ResourceLimitExceeded("file size", max_file_size,
                                    f"File size exceeds maximum limit ({size} > {max_file_size} bytes)")

    handle.seek(0)
    header = handle.readline()
    if not header:
        raise CorruptFileError("File appears to be empty or corrupted (no header line)")
    offset = len(header)

    offsets = array("q")
    for raw in handle:
        if len(offsets) >= max_rows:
            raise ResourceLimitExceeded("row count", max_rows,
                                        f"File exceeds maximum row count limit ({max_rows} rows)")
        if (len(offsets) + 1) * OFFSET_WIDTH > max_index_memory:
            raise ResourceLimitExceeded("index memory", max_index_memory,
                                        f"File index exceeds memory limit ({max_index_memory} bytes)")
        offsets.append(offset)
        offset += len(raw)

    handle.seek(0)
    index = LineIndex(offsets)
    LOGGER.debug("Indexed %d rows, index memory usage: %d bytes", len(index), index.memory_bytes)
    return IndexResult(header=header.rstrip(b"\r\n"), index=index)
