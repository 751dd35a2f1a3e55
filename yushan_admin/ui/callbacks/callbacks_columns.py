from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, Optional

import dash
from dash import Input, Output, State

from yushan_admin.core.columns import ColumnVisibilityManager
from yushan_admin.services.preference_store import InMemoryPreferenceStore, PreferenceStore
from yushan_admin.ui.helpers import build_table
from yushan_admin.ui.ids import IDs

if TYPE_CHECKING:
    from yushan_admin.ui.config import AppConfig

logger = logging.getLogger(__name__)


def _prefs_snapshot(store: PreferenceStore, prefs: Optional[Dict[str, str]], storage_key: Optional[str]):
    """Browser copy of the preferences after a change."""
    if isinstance(store, InMemoryPreferenceStore):
        return store.snapshot()
    # server-side store: mirror the one key so dependent callbacks still fire
    out = dict(prefs or {})
    if storage_key:
        out[storage_key] = store.get(storage_key)
    return out


def _log_column_change(table_name: str):
    def on_change(visible):
        logger.debug("Visible columns changed", extra={"table": table_name, "columns": visible})

    return on_change


def _apply_checklist(manager: ColumnVisibilityManager, checked) -> None:
    checked = set(checked or [])
    for col in manager.filtered_columns():
        if col.required:
            continue
        want = col.identity in checked
        if want != manager.is_visible(col.identity):
            manager.toggle(col.identity, want)


def register_column_callbacks(app: dash.Dash, ctx: AppConfig) -> None:
    @app.callback(
        Output(IDs.Store.COLUMN_PREFS, "data"),
        Output(IDs.Control.COLUMN_CHECKLIST, "options"),
        Output(IDs.Control.COLUMN_CHECKLIST, "value"),
        Output(IDs.Control.COLUMN_MASTER, "value"),
        Output(IDs.Control.COLUMN_MASTER, "label"),
        Output(IDs.Control.COLUMN_SEARCH, "value"),
        Output(IDs.Control.COLUMN_SUMMARY, "children"),
        Input(IDs.Control.COLUMN_CHECKLIST, "value"),
        Input(IDs.Control.COLUMN_MASTER, "value"),
        Input(IDs.Control.COLUMN_SEARCH, "value"),
        Input(IDs.Control.COLUMN_RESET, "n_clicks"),
        Input(IDs.Control.TABLE_SELECT, "value"),
        State(IDs.Store.COLUMN_PREFS, "data"),
    )
    def update_columns(checked, master, search, _reset_clicks, table_name, prefs):
        cfg = ctx.table(table_name)
        table, store = build_table(
            ctx, cfg, [], prefs=prefs, on_column_change=_log_column_change(cfg.name)
        )
        manager = table.column_manager
        manager.search(search)

        trigger = dash.ctx.triggered_id
        if trigger == IDs.Control.COLUMN_CHECKLIST:
            _apply_checklist(manager, checked)
        elif trigger == IDs.Control.COLUMN_MASTER:
            manager.set_all(bool(master))
        elif trigger == IDs.Control.COLUMN_RESET:
            manager.reset()
            logger.info("Column visibility reset", extra={"table": cfg.name})

        filtered = manager.filtered_columns()
        options = [
            {"label": c.title, "value": c.identity, "disabled": c.required}
            for c in filtered
        ]
        value = [c.identity for c in filtered if c.required or manager.is_visible(c.identity)]

        return (
            _prefs_snapshot(store, prefs, cfg.storage_key),
            options,
            value,
            manager.all_visible,
            manager.master_label,
            manager.search_term,
            manager.summary(),
        )
