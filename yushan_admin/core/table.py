from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from yushan_admin.core.actions import (
    ActionDescriptor,
    ActionLoadingMap,
    BulkActionDispatcher,
    BulkActionHandler,
)
from yushan_admin.core.columns import ColumnChangeCallback, ColumnDescriptor, ColumnVisibilityManager
from yushan_admin.core.export import ExportEngine, ExportSink
from yushan_admin.core.filters import FilterComposer, FilterField, FiltersChangeCallback
from yushan_admin.core.results import Ok, Result, Skipped
from yushan_admin.core.selection import SelectionState, checkbox_props, disabled_when

logger = logging.getLogger(__name__)

Record = Mapping[str, Any]
TableChangeCallback = Callable[[Dict[str, Any], Dict[str, Any], Dict[str, Any]], None]

DEFAULT_PAGE_SIZE = 10
PAGE_SIZE_OPTIONS = (10, 20, 50, 100)


def total_text(total: int, start: int, end: int) -> str:
    return f"{start}-{end} of {total} items"


@dataclass(frozen=True)
class TableOptions:
    """
    Feature switches for a DataTable.

    - pagination: overrides merged over the defaults, or False to disable paging
    - size: "small" | "middle" | "large" (row density)
    """

    enable_selection: bool = True
    enable_column_selector: bool = True
    enable_export: bool = True
    enable_filters: bool = False
    show_bulk_actions_dropdown: bool = True
    size: str = "middle"
    bordered: bool = False
    row_key: str = "id"
    pagination: Union[Mapping[str, Any], bool] = field(default_factory=dict)
    title: Optional[str] = None
    export_filename: str = "export"
    export_formats: Sequence[str] = ("csv", "excel", "json")
    storage_key: Optional[str] = None
    # field -> values that lock a row against selection
    disabled_when: Mapping[str, Sequence[Any]] = field(default_factory=dict)


TABLE_PRESETS: Dict[str, TableOptions] = {
    "default": TableOptions(),
    "compact": TableOptions(
        size="small",
        bordered=True,
        enable_selection=False,
        enable_column_selector=False,
        enable_export=False,
    ),
    "dashboard": TableOptions(
        size="small",
        enable_selection=False,
        enable_column_selector=False,
        enable_export=True,
        pagination={"page_size": 5, "simple": True},
    ),
    "admin": TableOptions(bordered=True, enable_filters=True),
}


def preset(name: str, **overrides: Any) -> TableOptions:
    try:
        base = TABLE_PRESETS[name]
    except KeyError:
        raise KeyError(f"Table preset '{name}' not found")
    return replace(base, **overrides)


class DataTable:
    """
    Orchestrates selection, column visibility, export, bulk actions and
    filters around one tabular dataset.

    The table never filters ``data_source`` itself; the host applies the
    FilterComposer output and passes the filtered records in.
    """

    def __init__(
            self,
            data_source: Sequence[Record],
            columns: Sequence[ColumnDescriptor],
            *,
            options: Optional[TableOptions] = None,
            on_bulk_action: Optional[BulkActionHandler] = None,
            bulk_actions: Optional[Sequence[ActionDescriptor]] = None,
            on_change: Optional[TableChangeCallback] = None,
            filters: Sequence[FilterField] = (),
            on_filters_change: Optional[FiltersChangeCallback] = None,
            store=None,
            export_sink: Optional[ExportSink] = None,
            export_data: Optional[Sequence[Record]] = None,
            selection: Optional[SelectionState] = None,
            action_loading: Optional[ActionLoadingMap] = None,
            on_column_change: Optional[ColumnChangeCallback] = None,
    ) -> None:
        self.options = options or TableOptions()
        self.data_source: List[Record] = list(data_source)
        self.export_data = list(export_data) if export_data is not None else None
        self._on_change = on_change
        self._on_bulk_action = on_bulk_action
        self.is_row_disabled = disabled_when(self.options.disabled_when)

        self.selection = selection or SelectionState()
        self.column_manager = ColumnVisibilityManager(
            columns,
            store=store,
            storage_key=self.options.storage_key,
            on_change=on_column_change,
        )
        self.dispatcher = BulkActionDispatcher(
            self._run_handler, bulk_actions, loading=action_loading
        )
        self.exporter = ExportEngine(
            filename=self.options.export_filename,
            formats=self.options.export_formats,
            sink=export_sink,
        )
        self.filters: Optional[FilterComposer] = None
        if self.options.enable_filters:
            self.filters = FilterComposer(filters, on_change=on_filters_change)

    # ------------------------------------------------------------------
    # Render config
    # ------------------------------------------------------------------
    def final_columns(self) -> List[ColumnDescriptor]:
        if self.options.enable_column_selector:
            return self.column_manager.get_visible_columns()
        return list(self.column_manager.columns)

    def pagination(self) -> Union[Dict[str, Any], bool]:
        if self.options.pagination is False:
            return False
        config: Dict[str, Any] = {
            "show_size_changer": True,
            "show_quick_jumper": True,
            "page_size": DEFAULT_PAGE_SIZE,
            "page_size_options": list(PAGE_SIZE_OPTIONS),
        }
        if isinstance(self.options.pagination, Mapping):
            config.update(self.options.pagination)
        return config

    def clamp_page(self, page_current: Optional[int]) -> int:
        """Zero-based page index pulled back onto the last page that has rows."""
        pagination = self.pagination()
        if pagination is False or not self.data_source:
            return 0
        last = (len(self.data_source) - 1) // pagination["page_size"]
        return min(max(page_current or 0, 0), last)

    def page_summary(self, page_current: int = 0) -> str:
        """Total text for a zero-based page index."""
        total = len(self.data_source)
        pagination = self.pagination()
        if not total:
            return total_text(0, 0, 0)
        if pagination is False:
            return total_text(total, 1, total)
        size = pagination["page_size"]
        start = self.clamp_page(page_current) * size + 1
        end = min(total, start + size - 1)
        return total_text(total, start, end)

    def row_selection(self) -> Optional[Dict[str, Any]]:
        if not self.options.enable_selection:
            return None
        return {
            "selected_keys": list(self.selection.selected_keys),
            "disabled_keys": [
                r.get(self.options.row_key)
                for r in self.data_source
                if checkbox_props(r, self.is_row_disabled)["disabled"]
            ],
        }

    def show_header(self) -> bool:
        opts = self.options
        return bool(
            opts.title
            or not self.selection.is_empty
            or opts.enable_column_selector
            or opts.enable_export
        )

    def show_bulk_actions(self) -> bool:
        return self.options.enable_selection and not self.selection.is_empty

    def footer_text(self) -> Optional[str]:
        if self.selection.is_empty:
            return None
        return f"{self.selection.count} of {len(self.data_source)} items selected"

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------
    def handle_table_change(
            self,
            pagination: Dict[str, Any],
            filters: Dict[str, Any],
            sorter: Dict[str, Any],
    ) -> None:
        if self._on_change is not None:
            self._on_change(pagination, filters, sorter)

    def select(self, keys: Sequence[Any], rows: Sequence[Record]) -> SelectionState:
        self.selection = self.selection.on_change(keys, rows)
        return self.selection

    def select_indices(self, indices: Optional[Sequence[int]]) -> SelectionState:
        self.selection = SelectionState.from_indices(
            self.data_source, indices, self.options.row_key, self.is_row_disabled
        )
        return self.selection

    def clear_selection(self) -> SelectionState:
        self.selection = self.selection.clear()
        return self.selection

    # ------------------------------------------------------------------
    # Bulk actions
    # ------------------------------------------------------------------
    def _run_handler(self, key: str, keys: List[Any], rows: List[Record]) -> Any:
        if self._on_bulk_action is None:
            return None
        return self._on_bulk_action(key, keys, rows)

    def _after_action(self, result: Result) -> Result:
        if isinstance(result, Ok):
            self.clear_selection()
        return result

    def run_bulk_action(self, key: str) -> Result:
        if not self.options.enable_selection:
            return Skipped()
        return self._after_action(self.dispatcher.trigger(key, self.selection))

    def confirm_bulk_action(self, key: str, accepted: bool = True) -> Result:
        return self._after_action(self.dispatcher.confirm(key, self.selection, accepted))

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------
    @property
    def exportable(self) -> List[Record]:
        return self.export_data if self.export_data is not None else self.data_source

    def export(self, item_key: Optional[str] = None) -> Result:
        """
        Export through the menu key ("all_csv", "selected_json", ...) or, in
        single-format mode, through the one button when ``item_key`` is None.
        """
        selected = list(self.selection.selected_rows)
        if item_key is None:
            return self.exporter.export_single(self.exportable, selected)
        return self.exporter.export_menu_choice(item_key, self.exportable, selected)
