"""Timeline viewing feature: Qt models and the per-file tab."""

from .models import ALL_COLUMNS, TimelineFilterProxyModel, TimelineTableModel
from .tab import FilterBar, TimelineTab

__all__ = [
    "ALL_COLUMNS",
    "FilterBar",
    "TimelineFilterProxyModel",
    "TimelineTab",
    "TimelineTableModel",
]
