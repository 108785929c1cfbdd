from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from PySide6.QtCore import QModelIndex, Qt, Signal
from PySide6.QtWidgets import (
    QComboBox,
    QHBoxLayout,
    QHeaderView,
    QLineEdit,
    QPushButton,
    QStatusBar,
    QTableView,
    QVBoxLayout,
    QWidget,
)

from app.common.dialogs.field_detail import FieldDetailDialog
from app.features.timeline.models import ALL_COLUMNS, TimelineFilterProxyModel, TimelineTableModel
from core.logging import get_logger
from core.timeline import TimelineTable

LOGGER = get_logger("app.features.timeline.tab")


class FilterBar(QWidget):
    """Column picker, search term input and Search button."""

    search_requested = Signal(str, str)  # column, term

    def __init__(self, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.column_picker = QComboBox()
        self.column_picker.setToolTip(
            "Select a column to search, or choose 'All Columns' to search the entire table."
        )
        self.term_input = QLineEdit()
        self.term_input.setPlaceholderText("Search term")
        self.search_button = QPushButton("Search")

        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self.column_picker)
        layout.addWidget(self.term_input, 1)
        layout.addWidget(self.search_button)

        self.search_button.clicked.connect(self._emit_search)
        self.term_input.returnPressed.connect(self._emit_search)

    def set_columns(self, columns: List[str]) -> None:
        self.column_picker.clear()
        self.column_picker.addItem(ALL_COLUMNS)
        self.column_picker.addItems([c for c in dict.fromkeys(columns) if c])

    def _emit_search(self) -> None:
        self.search_requested.emit(self.column_picker.currentText(), self.term_input.text())


class TimelineTab(QWidget):
    """One open timeline: filter bar, lazily populated table and status line."""

    # Forwarded from the model whenever the unsaved-tag state is republished
    dirty_changed = Signal(bool)

    def __init__(self, table: TimelineTable, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.table = table
        self._detail_windows: List[FieldDetailDialog] = []

        self.filter_bar = FilterBar()
        self.model = TimelineTableModel(table, self)
        self.proxy_model = TimelineFilterProxyModel(self)
        self.proxy_model.setSourceModel(self.model)

        self.table_view = QTableView()
        self.table_view.setModel(self.proxy_model)
        self.table_view.horizontalHeader().setSectionResizeMode(QHeaderView.Interactive)
        self.table_view.setSelectionBehavior(QTableView.SelectRows)
        self.status_bar = QStatusBar()

        layout = QVBoxLayout(self)
        layout.addWidget(self.filter_bar)
        layout.addWidget(self.table_view)
        layout.addWidget(self.status_bar)

        self.filter_bar.search_requested.connect(self._on_search_requested)
        self.table_view.doubleClicked.connect(self._on_table_double_clicked)
        self.model.dirty_changed.connect(self.dirty_changed)

        self.filter_bar.set_columns(self.column_names())
        self.update_status()

    @property
    def file_path(self) -> Path:
        return self.table.path

    def column_names(self) -> List[str]:
        return self.model.column_names()

    # Search

    def search(self, column: str, term: str) -> bool:
        """Filter the view to rows containing ``term``; True if any row matched."""
        found = self.proxy_model.set_search(column, term)
        self.update_status()
        return found

    def clear_search(self) -> None:
        self.proxy_model.clear_search()
        self.update_status()

    def _on_search_requested(self, column: str, term: str) -> None:
        if not self.search(column, term) and term:
            self.update_status("No matches found.")

    def update_status(self, message: str = "") -> None:
        if message:
            self.status_bar.showMessage(message)
        else:
            self.status_bar.showMessage(f"Rows: {self.proxy_model.rowCount()}")

    # Presentation

    def set_font_size(self, point_size: int) -> None:
        font = self.table_view.font()
        font.setPointSize(point_size)
        self.table_view.setFont(font)

    def font_size(self) -> int:
        return self.table_view.font().pointSize()

    def _on_table_double_clicked(self, index: QModelIndex) -> None:
        if not index.isValid():
            return
        self.open_field_detail(self.proxy_model.mapToSource(index))

    def open_field_detail(self, source_index: QModelIndex) -> Optional[FieldDetailDialog]:
        column = source_index.column()
        if self.table.tag_column is not None and column == self.table.tag_column:
            return None
        value = self.model.data(source_index)
        column_name = self.model.headerData(column, Qt.Horizontal) or ""
        dialog = FieldDetailDialog(column_name, "" if value is None else str(value), self)
        dialog.setAttribute(Qt.WA_DeleteOnClose)
        dialog.destroyed.connect(lambda *_: self._forget_detail(dialog))
        self._detail_windows.append(dialog)
        dialog.show()
        return dialog

    def _forget_detail(self, dialog: FieldDetailDialog) -> None:
        if dialog in self._detail_windows:
            self._detail_windows.remove(dialog)

    # Tags

    def has_unsaved_changes(self) -> bool:
        return self.table.dirty

    def save_changes(self) -> bool:
        saved = self.table.save()
        if not saved:
            LOGGER.warning("Saving tags for %s failed", self.table.path.name)
        return saved

    def release(self) -> None:
        """Close the underlying file; the tab must not be used afterwards."""
        self.model.release()
