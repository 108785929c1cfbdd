"""Qt models for the timeline feature."""

from .timeline_table import ALL_COLUMNS, TimelineFilterProxyModel, TimelineTableModel

__all__ = ["ALL_COLUMNS", "TimelineFilterProxyModel", "TimelineTableModel"]
