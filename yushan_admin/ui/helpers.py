from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Sequence, Tuple

import dash_bootstrap_components as dbc

from yushan_admin.config.model import TableConfig
from yushan_admin.core.columns import ColumnChangeCallback, ColumnDescriptor
from yushan_admin.core.filters import apply_filters
from yushan_admin.core.results import Notification
from yushan_admin.core.selection import RowPredicate, SelectionState, disabled_when
from yushan_admin.core.table import DataTable, TableChangeCallback
from yushan_admin.services.preference_store import InMemoryPreferenceStore, PreferenceStore

if TYPE_CHECKING:
    from yushan_admin.ui.config import AppConfig

TOAST_ICONS = {
    "success": "success",
    "info": "info",
    "warning": "warning",
    "error": "danger",
}

TOAST_HEADERS = {
    "success": "Success",
    "info": "Info",
    "warning": "Warning",
    "error": "Error",
}

TOAST_STYLE = {"position": "fixed", "top": 72, "right": 16, "width": 340, "zIndex": 1080}

DISABLED_ROW_STYLE = {"backgroundColor": "#f5f5f5", "color": "#adb5bd"}


def make_toast(notification: Optional[Notification]) -> List[dbc.Toast]:
    """Zero or one toast for a result notification."""
    if notification is None:
        return []
    return [
        dbc.Toast(
            notification.message,
            header=TOAST_HEADERS.get(notification.level, "Info"),
            icon=TOAST_ICONS.get(notification.level, "info"),
            duration=4000,
            is_open=True,
            dismissable=True,
            style=TOAST_STYLE,
        )
    ]


# ---------------------------------------------------------
# Records
# ---------------------------------------------------------
def unwrap_filter_values(table_name: str, stored: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Filter values saved for ``table_name``; values of another table are ignored."""
    if not stored or stored.get("table") != table_name:
        return {}
    return dict(stored.get("values") or {})


def unwrap_selection(table_name: str, stored: Optional[Mapping[str, Any]]) -> SelectionState:
    if not stored or stored.get("table") != table_name:
        return SelectionState()
    return SelectionState.from_dict(stored)


def wrap_selection(table_name: str, selection: SelectionState) -> Dict[str, Any]:
    return {"table": table_name, **selection.to_dict()}


def load_records(ctx: AppConfig, cfg: TableConfig, filter_values: Mapping[str, Any]) -> List[Dict[str, Any]]:
    records = ctx.services[cfg.name].records()
    if not filter_values:
        return records
    return apply_filters(records, filter_values, cfg.filters)


def preference_store_for(ctx: AppConfig, prefs: Optional[Mapping[str, str]]) -> PreferenceStore:
    if ctx.preference_store is not None:
        return ctx.preference_store
    return InMemoryPreferenceStore(prefs or {})


def build_table(
        ctx: AppConfig,
        cfg: TableConfig,
        records: Sequence[Mapping[str, Any]],
        *,
        selection: Optional[SelectionState] = None,
        prefs: Optional[Mapping[str, str]] = None,
        on_change: Optional[TableChangeCallback] = None,
        on_column_change: Optional[ColumnChangeCallback] = None,
) -> Tuple[DataTable, PreferenceStore]:
    store = preference_store_for(ctx, prefs)
    service = ctx.services[cfg.name]
    table = DataTable(
        records,
        cfg.columns,
        options=cfg.options(ctx.global_config.page_size),
        on_bulk_action=service.bulk_update,
        bulk_actions=cfg.bulk_actions or None,
        filters=cfg.filters,
        store=store,
        selection=selection,
        action_loading=ctx.loading_for(cfg.name),
        on_change=on_change,
        on_column_change=on_column_change,
    )
    return table, store


# ---------------------------------------------------------
# dash_table adapters
# ---------------------------------------------------------
def _cell(value: Any) -> Any:
    # dash_table renders neither bools nor lists
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return value


def grid_rows(records: Sequence[Mapping[str, Any]], row_key: str) -> List[Dict[str, Any]]:
    return [{**{k: _cell(v) for k, v in r.items()}, "id": r.get(row_key)} for r in records]


def grid_columns(columns: Sequence[ColumnDescriptor]) -> List[Dict[str, Any]]:
    out = []
    for c in columns:
        spec: Dict[str, Any] = {"name": c.title, "id": c.data_field}
        if c.extra.get("type") in ("numeric", "text", "datetime"):
            spec["type"] = c.extra["type"]
        out.append(spec)
    return out


def disabled_row_styles(
        records: Sequence[Mapping[str, Any]],
        row_key: str,
        is_disabled: Optional[RowPredicate] = None,
) -> List[Dict[str, Any]]:
    is_disabled = is_disabled or disabled_when()
    styles = []
    for r in records:
        if is_disabled(r):
            styles.append(
                {
                    "if": {"filter_query": f"{{id}} = {json.dumps(r.get(row_key))}"},
                    **DISABLED_ROW_STYLE,
                }
            )
    return styles
