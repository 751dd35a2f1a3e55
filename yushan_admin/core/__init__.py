"""
Core domain layer: selection, column visibility, export, bulk actions,
filters and the DataTable that composes them.
"""

from .actions import ActionDescriptor, BulkActionDispatcher, DEFAULT_ACTIONS
from .columns import ColumnDescriptor, ColumnVisibilityManager
from .export import ExportEngine, ExportArtifact
from .filters import FilterComposer, FilterField, FilterType
from .results import Err, NeedsConfirmation, Ok, Skipped, notification_for
from .selection import SelectionState
from .table import DataTable, TableOptions, TABLE_PRESETS

__all__ = [
    "ActionDescriptor",
    "BulkActionDispatcher",
    "DEFAULT_ACTIONS",
    "ColumnDescriptor",
    "ColumnVisibilityManager",
    "ExportEngine",
    "ExportArtifact",
    "FilterComposer",
    "FilterField",
    "FilterType",
    "Err",
    "NeedsConfirmation",
    "Ok",
    "Skipped",
    "notification_for",
    "SelectionState",
    "DataTable",
    "TableOptions",
    "TABLE_PRESETS",
]
