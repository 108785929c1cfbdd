"""
Common dialogs package - re-exports all dialog classes.

    from app.common.dialogs import FieldDetailDialog, SearchDialog, show_error_dialog
"""
from __future__ import annotations

from .field_detail import FieldDetailDialog
from .search import SearchDialog, collect_search_columns
from .utils import show_error_dialog

__all__ = [
    "FieldDetailDialog",
    "SearchDialog",
    "collect_search_columns",
    "show_error_dialog",
]
