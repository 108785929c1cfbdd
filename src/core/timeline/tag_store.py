"""
Tag overlay for timeline rows.

Tagged rows live in memory as a set of 0-based data-row numbers and are
persisted to a sidecar file (one decimal row number per line) inside the
application data directory. The source timeline is never written.
"""
from __future__ import annotations

import re
from pathlib import Path
from typing import Callable, FrozenSet, Iterator, List, Optional, Set, TextIO

from core.exceptions import PersistenceFailure
from core.logging import get_logger

LOGGER = get_logger("core.timeline.tag_store")

TAG_FILE_SUFFIX = ".tags"
FALLBACK_BASE_NAME = "timeline"
MAX_BASE_NAME_LENGTH = 200
MAX_TAG_LINES = 1_000_000
MAX_TAG_LINE_LENGTH = 20
_READ_CHUNK = 64

_DOT_RUNS = re.compile(r"\.{2,}")
_SEPARATORS = re.compile(r"[\\/]")
_INVALID_CHARS = re.compile(r'[<>:"|?*\x00-\x1f]')
_ROW_NUMBER = re.compile(r"[+-]?[0-9]+")

# (row or None for save/load, new dirty state)
TagListener = Callable[[Optional[int], bool], None]


def sanitize_file_name(name: str) -> str:
    """Make ``name`` safe to use as a single file name inside the data directory."""
    sanitized = _DOT_RUNS.sub("", name)
    sanitized = _SEPARATORS.sub("", sanitized)
    sanitized = _INVALID_CHARS.sub("", sanitized)
    sanitized = sanitized[:MAX_BASE_NAME_LENGTH]
    return sanitized or FALLBACK_BASE_NAME


def _complete_base_name(path: Path) -> str:
    # "evidence.plaso.csv" -> "evidence.plaso"
    name = path.name
    if "." in name:
        return name.rsplit(".", 1)[0]
    return name


def tag_file_path(source_path: Path, data_dir: Path) -> Path:
    """
    Resolve the sidecar tag file for ``source_path``, creating ``data_dir`` if needed.

    Raises:
        PersistenceFailure: data directory cannot be created or the source vanished
    """
    try:
        data_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise PersistenceFailure(f"Failed to create application data directory {data_dir}: {exc}") from exc

    if not source_path.exists():
        raise PersistenceFailure(f"Source timeline file no longer exists: {source_path}")

    return data_dir / f"{sanitize_file_name(_complete_base_name(source_path))}{TAG_FILE_SUFFIX}"


def _bounded_lines(handle: TextIO, max_lines: int) -> Iterator[str]:
    """Yield stripped lines without ever buffering more than one short chunk.

    Lines longer than the read chunk come back as a single over-length chunk and
    their remainder is skipped.
    """
    produced = 0
    continuation = False
    while produced < max_lines:
        chunk = handle.readline(_READ_CHUNK)
        if not chunk:
            return
        complete = chunk.endswith("\n")
        if continuation:
            continuation = not complete
            continue
        continuation = not complete and len(chunk) == _READ_CHUNK
        produced += 1
        yield chunk.strip() if complete or not continuation else chunk


class TagStore:
    """Set of tagged rows with a dirty flag and change notifications."""

    def __init__(self, source_path: Path, row_count: int, data_dir: Path) -> None:
        self.source_path = source_path
        self.row_count = row_count
        self.data_dir = data_dir
        self._rows: Set[int] = set()
        self._dirty = False
        self._listeners: List[TagListener] = []

    # Observation

    def subscribe(self, listener: TagListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: TagListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, row: Optional[int]) -> None:
        for listener in list(self._listeners):
            listener(row, self._dirty)

    # State

    @property
    def dirty(self) -> bool:
        return self._dirty

    def is_tagged(self, row: int) -> bool:
        return row in self._rows

    def tagged_rows(self) -> FrozenSet[int]:
        return frozenset(self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    def __contains__(self, row: object) -> bool:
        return row in self._rows

    def toggle(self, row: int, tagged: bool) -> bool:
        """
        Set the tag state of ``row``.

        Returns:
            True if the overlay changed, False if it already matched
        """
        if tagged == (row in self._rows):
            return False
        if tagged:
            self._rows.add(row)
        else:
            self._rows.discard(row)
        self._dirty = True
        self._notify(row)
        return True

    # Persistence

    @property
    def path(self) -> Path:
        return tag_file_path(self.source_path, self.data_dir)

    def load(self) -> int:
        """
        Replace the overlay with the sidecar contents.

        A missing sidecar yields an empty overlay. Unreadable sidecars and bad
        entries are logged and skipped. Returns the number of rows loaded.
        """
        self._rows.clear()
        self._dirty = False
        try:
            path = self.path
        except PersistenceFailure as exc:
            LOGGER.warning("Tag file unavailable, starting with no tags: %s", exc)
            return 0
        if not path.exists():
            return 0

        rows: Set[int] = set()
        lines_read = 0
        try:
            with path.open("r", encoding="utf-8") as handle:
                for line in _bounded_lines(handle, MAX_TAG_LINES):
                    lines_read += 1
                    if not line:
                        continue
                    if len(line) > MAX_TAG_LINE_LENGTH:
                        LOGGER.warning("Invalid tag data detected in %s, skipping", path.name)
                        continue
                    if not _ROW_NUMBER.fullmatch(line):
                        LOGGER.warning("Non-numeric tag entry in %s, skipping", path.name)
                        continue
                    row = int(line)
                    if not 0 <= row < self.row_count:
                        LOGGER.warning("Tag references invalid row number %d, skipping", row)
                        continue
                    rows.add(row)
                if lines_read >= MAX_TAG_LINES and handle.readline(_READ_CHUNK):
                    LOGGER.warning("Tag file contains too many entries, some were not loaded")
        except (OSError, UnicodeDecodeError) as exc:
            LOGGER.warning("Failed to read tag file %s, starting with no tags: %s", path, exc)
            return 0

        self._rows = rows
        LOGGER.debug("Loaded %d tagged rows from %s", len(rows), path)
        return len(rows)

    def save(self) -> bool:
        """
        Write the overlay to the sidecar file.

        Returns:
            True on success (dirty flag cleared), False if the file could not be written
        """
        try:
            path = self.path
            payload = "".join(f"{row}\n" for row in sorted(self._rows))
            try:
                path.write_text(payload, encoding="utf-8")
            except OSError as exc:
                raise PersistenceFailure(f"Failed to write tag file {path}: {exc}") from exc
        except PersistenceFailure as exc:
            LOGGER.warning("%s", exc)
            return False

        self._dirty = False
        LOGGER.info("Saved %d tagged rows to %s", len(self._rows), path)
        self._notify(None)
        return True
