"""
Qt models over a file-backed TimelineTable.

TimelineTableModel exposes cells lazily (nothing is cached on the Qt side) and
turns the Super schema's tag column into a checkbox. TimelineFilterProxyModel
hides rows that do not contain a search term.
"""

from __future__ import annotations

from typing import Any, Optional

from PySide6.QtCore import QAbstractTableModel, QModelIndex, QObject, QSortFilterProxyModel, Qt, Signal
from PySide6.QtGui import QColor

from core.timeline import TimelineTable, row_matches


ALL_COLUMNS = "All Columns"


def _is_checked(value: Any) -> bool:
    # views hand over either the enum or its integer value
    if isinstance(value, bool):
        return value
    if isinstance(value, Qt.CheckState):
        return value == Qt.CheckState.Checked
    return int(value) == Qt.CheckState.Checked.value


class TimelineTableModel(QAbstractTableModel):
    """Table model backed by a TimelineTable."""

    TAGGED_ROW_COLOR = (240, 240, 240)  # Light gray

    # Emitted whenever the table's unsaved-tag state is republished
    dirty_changed = Signal(bool)

    def __init__(self, table: TimelineTable, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self.table = table
        self.table.subscribe(self._on_tags_changed)

    def rowCount(self, parent: QModelIndex = QModelIndex()) -> int:  # noqa: N802
        if parent.isValid():
            return 0
        return self.table.row_count

    def columnCount(self, parent: QModelIndex = QModelIndex()) -> int:  # noqa: N802
        if parent.isValid():
            return 0
        return self.table.column_count

    def _is_tag_column(self, column: int) -> bool:
        return self.table.tag_column is not None and column == self.table.tag_column

    def data(self, index: QModelIndex, role: int = Qt.DisplayRole) -> Any:  # noqa: N802
        if not index.isValid():
            return None
        row, column = index.row(), index.column()

        if self._is_tag_column(column):
            if role == Qt.CheckStateRole:
                return Qt.Checked if self.table.is_tagged(row) else Qt.Unchecked
            if role == Qt.DisplayRole:
                return None  # no text next to the checkbox

        if role == Qt.BackgroundRole and self.table.is_tagged(row):
            return QColor(*self.TAGGED_ROW_COLOR)

        if role == Qt.DisplayRole:
            return self.table.get_cell(row, column)

        return None

    def headerData(self, section: int, orientation: Qt.Orientation, role: int = Qt.DisplayRole) -> Any:  # noqa: N802
        if role != Qt.DisplayRole or orientation != Qt.Horizontal:
            return None
        if 0 <= section < self.table.column_count:
            return self.table.columns[section]
        return None

    def flags(self, index: QModelIndex) -> Qt.ItemFlag:  # noqa: N802
        if not index.isValid():
            return Qt.NoItemFlags
        flags = Qt.ItemIsEnabled | Qt.ItemIsSelectable
        if self._is_tag_column(index.column()):
            flags |= Qt.ItemIsUserCheckable
        return flags

    def setData(self, index: QModelIndex, value: Any, role: int = Qt.EditRole) -> bool:  # noqa: N802
        if not index.isValid() or role != Qt.CheckStateRole or not self._is_tag_column(index.column()):
            return False
        self.table.set_tag(index.row(), _is_checked(value))
        return True

    def column_names(self) -> list[str]:
        return list(self.table.columns)

    def _on_tags_changed(self, row: Optional[int], dirty: bool) -> None:
        if row is not None:
            last_column = max(0, self.columnCount() - 1)
            self.dataChanged.emit(self.index(row, 0), self.index(row, last_column))
        self.dirty_changed.emit(dirty)

    def release(self) -> None:
        """Detach from the table and close its file handle."""
        self.table.unsubscribe(self._on_tags_changed)
        self.table.close()


class TimelineFilterProxyModel(QSortFilterProxyModel):
    """Hides rows that do not contain the current search term."""

    def __init__(self, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._term = ""
        self._column: Optional[str] = None

    @property
    def term(self) -> str:
        return self._term

    def set_search(self, column: Optional[str], term: str) -> bool:
        """
        Filter to rows containing ``term`` in ``column`` (all columns for None
        or "All Columns"). An empty term clears the filter.

        Returns:
            True if at least one row is visible for a non-empty term
        """
        self._term = term
        self._column = None if column in (None, ALL_COLUMNS) else column
        self.invalidateFilter()
        if not term:
            return False
        return self.rowCount() > 0

    def clear_search(self) -> None:
        self.set_search(None, "")

    def filterAcceptsRow(self, source_row: int, source_parent: QModelIndex) -> bool:  # noqa: N802
        if not self._term:
            return True
        source = self.sourceModel()
        if not isinstance(source, TimelineTableModel):
            return super().filterAcceptsRow(source_row, source_parent)
        return row_matches(source.table, source_row, self._term, self._column)
