"""
Read-only detail view for a single table cell.
"""
from __future__ import annotations

from typing import Optional

from PySide6.QtGui import QFont, QFontDatabase, QTextOption
from PySide6.QtWidgets import QDialog, QDialogButtonBox, QLabel, QTextEdit, QVBoxLayout, QWidget


class FieldDetailDialog(QDialog):
    """Non-modal window showing the full text of one field in a monospace font.

    Message fields arrive already pretty-printed when they hold JSON or XML.
    """

    def __init__(self, field_name: str, content: str, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setWindowTitle(f"Field Details: {field_name}")
        self.setModal(False)
        self.resize(600, 400)

        layout = QVBoxLayout(self)

        self.title_label = QLabel(field_name)
        title_font = self.title_label.font()
        title_font.setBold(True)
        title_font.setPointSize(title_font.pointSize() + 1)
        self.title_label.setFont(title_font)
        layout.addWidget(self.title_label)

        self.content_edit = QTextEdit()
        self.content_edit.setPlainText(content)
        self.content_edit.setReadOnly(True)
        mono_font = QFontDatabase.systemFont(QFontDatabase.FixedFont)
        mono_font.setStyleHint(QFont.Monospace)
        self.content_edit.setFont(mono_font)
        self.content_edit.setWordWrapMode(QTextOption.WrapAtWordBoundaryOrAnywhere)
        layout.addWidget(self.content_edit)

        button_box = QDialogButtonBox(QDialogButtonBox.Close)
        button_box.rejected.connect(self.reject)
        layout.addWidget(button_box)

    def content(self) -> str:
        return self.content_edit.toPlainText()
