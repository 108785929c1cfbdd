from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Optional

from PySide6.QtGui import QAction, QCloseEvent, QKeySequence
from PySide6.QtWidgets import QApplication, QDialog, QFileDialog, QMainWindow, QMessageBox, QTabWidget

from core.app_version import APP_NAME, get_app_version
from core.config import AppConfig, load_app_config
from core.exceptions import TimelineError
from core.logging import configure_logging, get_logger
from core.timeline import TimelineTable

from .common.dialogs import SearchDialog, collect_search_columns, show_error_dialog
from .features.timeline import ALL_COLUMNS, TimelineTab

LOGGER = get_logger("app.main")

FILE_FILTER = "Timeline Files (*.csv *.txt);;All Files (*)"


class MainWindow(QMainWindow):
    def __init__(self, base_dir: Path, app_config: Optional[AppConfig] = None) -> None:
        super().__init__()
        self.base_dir = base_dir
        self.app_config: AppConfig = app_config or load_app_config(base_dir)
        self.default_font_size = self.app_config.view.font_size
        self.font_size = self.default_font_size

        self.resize(1200, 800)

        self.tabs = QTabWidget()
        self.tabs.setTabsClosable(True)
        self.tabs.setDocumentMode(True)
        self.tabs.currentChanged.connect(self._on_tab_changed)
        self.tabs.tabCloseRequested.connect(self.close_tab)
        self.setCentralWidget(self.tabs)

        self._build_menus()
        self.update_window_title()

    def _build_menus(self) -> None:
        # File menu
        self.file_menu = self.menuBar().addMenu("&File")
        self.open_action = QAction("&Open...", self)
        self.open_action.setShortcut(QKeySequence.Open)
        self.open_action.triggered.connect(self._open_file_dialog)
        self.file_menu.addAction(self.open_action)

        self.save_action = QAction("&Save", self)
        self.save_action.setShortcut(QKeySequence.Save)
        self.save_action.setEnabled(False)  # Enabled when the current tab has unsaved tags
        self.save_action.triggered.connect(self.save_current)
        self.file_menu.addAction(self.save_action)

        self.file_menu.addSeparator()
        self.exit_action = QAction("E&xit", self)
        self.exit_action.triggered.connect(self.close)
        self.file_menu.addAction(self.exit_action)

        # View menu
        self.view_menu = self.menuBar().addMenu("&View")
        self.font_increase_action = QAction("Increase Font Size", self)
        self.font_increase_action.setShortcut(QKeySequence.ZoomIn)
        self.font_increase_action.triggered.connect(lambda: self.set_font_size(self.font_size + 1))
        self.view_menu.addAction(self.font_increase_action)

        self.font_decrease_action = QAction("Decrease Font Size", self)
        self.font_decrease_action.setShortcut(QKeySequence.ZoomOut)
        self.font_decrease_action.triggered.connect(lambda: self.set_font_size(self.font_size - 1))
        self.view_menu.addAction(self.font_decrease_action)

        self.view_menu.addSeparator()
        self.font_reset_action = QAction("Reset Font", self)
        self.font_reset_action.triggered.connect(lambda: self.set_font_size(self.default_font_size))
        self.view_menu.addAction(self.font_reset_action)

        # Search menu
        self.search_menu = self.menuBar().addMenu("&Search")
        self.search_current_action = QAction("Search in Current Tab...", self)
        self.search_current_action.setShortcut(QKeySequence.Find)
        self.search_current_action.triggered.connect(lambda: self._show_search_dialog(all_tabs=False))
        self.search_menu.addAction(self.search_current_action)

        self.search_all_action = QAction("Search in All Tabs...", self)
        self.search_all_action.triggered.connect(lambda: self._show_search_dialog(all_tabs=True))
        self.search_menu.addAction(self.search_all_action)

        self.search_menu.addSeparator()
        self.clear_search_action = QAction("Clear Search", self)
        self.clear_search_action.triggered.connect(self.clear_search)
        self.search_menu.addAction(self.clear_search_action)

    # Tabs

    def timeline_tabs(self) -> List[TimelineTab]:
        tabs = []
        for i in range(self.tabs.count()):
            widget = self.tabs.widget(i)
            if isinstance(widget, TimelineTab):
                tabs.append(widget)
        return tabs

    def current_tab(self) -> Optional[TimelineTab]:
        widget = self.tabs.currentWidget()
        return widget if isinstance(widget, TimelineTab) else None

    def _open_file_dialog(self) -> None:
        file_name, _ = QFileDialog.getOpenFileName(self, "Open Timeline File", "", FILE_FILTER)
        if file_name:
            self.open_path(Path(file_name))

    def open_path(self, path: Path) -> Optional[TimelineTab]:
        """Open ``path`` in a new tab; errors are reported and None returned."""
        try:
            table = TimelineTable(path, self.app_config.data_dir)
        except TimelineError as exc:
            LOGGER.warning("Failed to load %s: %s", path, exc)
            show_error_dialog(
                self,
                "Error Loading File",
                f"Failed to load the timeline file: {exc}",
                details=f"{type(exc).__name__}: {path}",
            )
            return None

        tab = TimelineTab(table, self)
        tab.set_font_size(self.font_size)
        tab.dirty_changed.connect(self._on_dirty_changed)
        index = self.tabs.addTab(tab, path.name)
        self.tabs.setTabToolTip(index, str(path))
        self.tabs.setCurrentWidget(tab)
        self.update_window_title()
        self.statusBar().showMessage("File loaded successfully", 2000)
        return tab

    def close_tab(self, index: int) -> bool:
        tab = self.tabs.widget(index)
        if not isinstance(tab, TimelineTab):
            return False
        if tab.has_unsaved_changes() and not self._confirm_discard([tab]):
            return False
        self.tabs.removeTab(index)
        tab.release()
        tab.deleteLater()
        self.update_window_title()
        return True

    # Saving

    def save_current(self) -> bool:
        tab = self.current_tab()
        if tab is None:
            return False
        if tab.save_changes():
            self.statusBar().showMessage("Tags saved successfully.", 2000)
            self._on_dirty_changed(False)
            return True
        QMessageBox.warning(self, "Save Error", "Failed to save tags. Please check file permissions.")
        return False

    def _confirm_discard(self, dirty_tabs: List[TimelineTab]) -> bool:
        """Ask to save ``dirty_tabs``; False means the caller must not close them."""
        names = "\n".join(tab.file_path.name for tab in dirty_tabs)
        result = QMessageBox.question(
            self,
            "Unsaved Changes",
            "You have unsaved changes in the following tabs:\n\n"
            f"{names}\n\nDo you want to save your changes before closing?",
            QMessageBox.Save | QMessageBox.Discard | QMessageBox.Cancel,
            QMessageBox.Save,
        )
        if result == QMessageBox.Cancel:
            return False
        if result == QMessageBox.Discard:
            return True

        all_saved = True
        for tab in dirty_tabs:
            if not tab.save_changes():
                all_saved = False
                QMessageBox.warning(
                    self,
                    "Save Error",
                    f"Failed to save tags for {tab.file_path.name}. Please check file permissions.",
                )
        return all_saved

    def closeEvent(self, event: QCloseEvent) -> None:  # noqa: N802
        dirty_tabs = [tab for tab in self.timeline_tabs() if tab.has_unsaved_changes()]
        if dirty_tabs and not self._confirm_discard(dirty_tabs):
            event.ignore()
            return
        for tab in self.timeline_tabs():
            tab.release()
        LOGGER.info("Application closing")
        event.accept()

    # View

    def set_font_size(self, size: int) -> None:
        self.font_size = self.app_config.view.clamp(size)
        for tab in self.timeline_tabs():
            tab.set_font_size(self.font_size)

    # Search

    def _show_search_dialog(self, all_tabs: bool) -> None:
        targets = self.timeline_tabs() if all_tabs else [t for t in [self.current_tab()] if t]
        columns = collect_search_columns(tab.column_names() for tab in targets)
        if not columns:
            self.statusBar().showMessage("No columns available for search.")
            return

        title = "Search in All Tabs" if all_tabs else "Search in Current Tab"
        dialog = SearchDialog(columns, title, self)
        if dialog.exec() != QDialog.Accepted:
            return
        column, term = dialog.values()
        self.search(column, term, all_tabs=all_tabs)

    def search(self, column: str, term: str, all_tabs: bool = False) -> int:
        """Filter the current (or every) tab; returns how many tabs matched."""
        if not term:
            return 0
        targets = self.timeline_tabs() if all_tabs else [t for t in [self.current_tab()] if t]

        matched: List[TimelineTab] = []
        for tab in targets:
            # a tab without the column simply has no matches
            if tab.search(column or ALL_COLUMNS, term):
                matched.append(tab)

        if matched:
            self.tabs.setCurrentWidget(matched[0])
            self.statusBar().showMessage(f"{len(matched)} tab(s) matched for '{term}'.")
        else:
            self.statusBar().showMessage("No matches found.")
        return len(matched)

    def clear_search(self) -> None:
        tabs = self.timeline_tabs()
        for tab in tabs:
            tab.clear_search()
        self.statusBar().showMessage(f"Cleared search in {len(tabs)} tab(s).")

    # Title and actions

    def _on_dirty_changed(self, _dirty: bool) -> None:
        self.update_window_title()
        tab = self.current_tab()
        self.save_action.setEnabled(bool(tab and tab.has_unsaved_changes()))

    def _on_tab_changed(self, _index: int) -> None:
        self._on_dirty_changed(False)

    def update_window_title(self) -> None:
        title = APP_NAME
        tab = self.current_tab()
        if tab is not None:
            title += f" - {tab.file_path.name}"
            if tab.has_unsaved_changes():
                title += " *"
        self.setWindowTitle(title)


def main(argv: Optional[List[str]] = None) -> int:
    argv = list(sys.argv if argv is None else argv)
    base_dir = Path(__file__).resolve().parents[2]
    app_config = load_app_config(base_dir)

    configure_logging(app_config.logs_dir, app_config.logging)
    LOGGER.info("%s %s starting", APP_NAME, get_app_version())

    app = QApplication(argv)
    window = MainWindow(base_dir, app_config)
    for arg in argv[1:]:
        if not arg.startswith("-"):
            window.open_path(Path(arg))
    window.show()
    return app.exec()


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
