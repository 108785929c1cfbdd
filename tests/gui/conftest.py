"""
Qt application setup and common fixtures for GUI tests.
"""
import os
import sys

import pytest

# Ensure offscreen rendering for GUI tests by default
os.environ.setdefault('QT_QPA_PLATFORM', 'offscreen')

# Import Qt before any application code to set platform
from PySide6.QtCore import Qt
from PySide6.QtWidgets import QApplication

from core.config import AppConfig


@pytest.fixture(scope='session')
def qapp():
    """
    Session-wide QApplication instance.

    A single QApplication is shared by all GUI tests to avoid
    "QApplication already exists" errors.
    """
    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv)
        app.setAttribute(Qt.AA_ShareOpenGLContexts, True)
    yield app


@pytest.fixture
def app_config(tmp_path, data_dir):
    """Configuration pointing every writable location into tmp_path."""
    return AppConfig(base_dir=tmp_path, data_dir=data_dir, logs_dir=tmp_path / "logs")


def pytest_configure(config):
    config.addinivalue_line(
        "markers",
        "gui_live: GUI tests that require a live display"
    )


def pytest_collection_modifyitems(config, items):
    """Default all GUI tests to gui_offscreen unless explicitly marked."""
    for item in items:
        if "tests/gui" not in str(item.fspath):
            continue
        if item.get_closest_marker("gui_live") or item.get_closest_marker("gui_offscreen"):
            continue
        item.add_marker(pytest.mark.gui_offscreen)
