"""
Shared utility functions for dialogs.
"""
from __future__ import annotations

from typing import Optional

from PySide6.QtWidgets import QApplication, QMessageBox, QWidget


def show_error_dialog(
    parent: Optional[QWidget],
    title: str,
    message: str,
    details: str = "",
) -> None:
    """
    Show a modal error dialog whose text can be copied to the clipboard.

    Args:
        parent: Parent widget
        title: Dialog title
        message: Error message
        details: Additional details (shown in detailed text)
    """
    dialog = QMessageBox(parent)
    dialog.setWindowTitle(title)
    dialog.setIcon(QMessageBox.Critical)
    dialog.setText(message)
    if details:
        dialog.setDetailedText(details)
    copy_button = dialog.addButton("Copy details", QMessageBox.ActionRole)
    dialog.addButton(QMessageBox.Close)

    def _copy_payload() -> None:
        payload = f"{title}\n{message}"
        if details:
            payload = f"{payload}\n\n{details}"
        QApplication.clipboard().setText(payload)

    copy_button.clicked.connect(_copy_payload)
    dialog.exec()
