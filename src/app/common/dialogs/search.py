"""
Search prompt used by the Search menu.
"""
from __future__ import annotations

from typing import Iterable, Optional, Tuple

from PySide6.QtWidgets import (
    QComboBox,
    QDialog,
    QDialogButtonBox,
    QLabel,
    QLineEdit,
    QVBoxLayout,
    QWidget,
)

from app.features.timeline.models import ALL_COLUMNS


class SearchDialog(QDialog):
    """Asks for a search term and the column to search in."""

    def __init__(self, columns: Iterable[str], title: str, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setWindowTitle(title)

        layout = QVBoxLayout(self)
        layout.addWidget(QLabel("Search term:"))
        self.term_input = QLineEdit()
        layout.addWidget(self.term_input)

        layout.addWidget(QLabel("Column:"))
        self.column_picker = QComboBox()
        self.column_picker.addItem(ALL_COLUMNS)
        self.column_picker.addItems(list(columns))
        layout.addWidget(self.column_picker)

        buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

    def values(self) -> Tuple[str, str]:
        """Return (column, term) as entered."""
        return self.column_picker.currentText(), self.term_input.text()


def collect_search_columns(column_lists: Iterable[Iterable[str]]) -> list[str]:
    """Merge column names from several tables: trimmed, non-empty, unique, sorted."""
    merged = set()
    for columns in column_lists:
        for name in columns:
            name = (name or "").strip()
            if name:
                merged.add(name)
    return sorted(merged)
