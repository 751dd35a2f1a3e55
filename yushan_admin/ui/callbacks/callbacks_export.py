from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import dash
import dash_bootstrap_components as dbc
from dash import ALL, Input, Output, State, dcc, no_update
from dash.exceptions import PreventUpdate

from yushan_admin.core.export import ExportArtifact
from yushan_admin.core.results import Ok, notification_for
from yushan_admin.core.table import DataTable
from yushan_admin.ui.helpers import (
    build_table,
    load_records,
    make_toast,
    unwrap_filter_values,
    unwrap_selection,
)
from yushan_admin.ui.ids import IDs, export_item_id, export_single_id

if TYPE_CHECKING:
    from yushan_admin.ui.config import AppConfig

logger = logging.getLogger(__name__)


def build_export_control(table: DataTable, table_name: str):
    if not table.options.enable_export:
        return []

    exporter = table.exporter
    data = table.exportable
    selected = list(table.selection.selected_rows)

    if exporter.single_format:
        return dbc.Button(
            exporter.button_label(),
            id=export_single_id(table_name),
            color="primary",
            outline=True,
            size="sm",
            disabled=exporter.is_disabled(data, selected),
        )

    items = []
    for item in exporter.menu_items(data, selected):
        if item.divider:
            items.append(dbc.DropdownMenuItem(divider=True))
            continue
        items.append(
            dbc.DropdownMenuItem(
                f"{item.label} ({item.count})",
                id=export_item_id(item.key),
                disabled=item.disabled,
            )
        )
    return dbc.DropdownMenu(
        label=exporter.button_label(),
        size="sm",
        color="primary",
        children=items,
        disabled=exporter.is_disabled(data, selected),
    )


def register_export_callbacks(app: dash.Dash, ctx: AppConfig) -> None:
    @app.callback(
        Output(IDs.Control.EXPORT_CONTAINER, "children"),
        Input(IDs.Control.TABLE_SELECT, "value"),
        Input(IDs.Store.SELECTION, "data"),
        Input(IDs.Store.FILTER_VALUES, "data"),
        Input(IDs.Store.DATA_VERSION, "data"),
    )
    def update_export_control(table_name, selection_store, filter_store, _data_version):
        cfg = ctx.table(table_name)
        records = load_records(ctx, cfg, unwrap_filter_values(cfg.name, filter_store))
        table, _ = build_table(
            ctx, cfg, records, selection=unwrap_selection(cfg.name, selection_store)
        )
        return build_export_control(table, cfg.name)

    @app.callback(
        Output(IDs.Control.EXPORT_DOWNLOAD, "data"),
        Output(IDs.Control.EXPORT_TOASTS, "children"),
        Input({"type": IDs.Pattern.EXPORT_ITEM, "key": ALL}, "n_clicks"),
        Input({"type": IDs.Pattern.EXPORT_SINGLE, "key": ALL}, "n_clicks"),
        State(IDs.Store.SELECTION, "data"),
        State(IDs.Store.FILTER_VALUES, "data"),
        State(IDs.Control.TABLE_SELECT, "value"),
        prevent_initial_call=True,
    )
    def run_export(_item_clicks, _single_clicks, selection_store, filter_store, table_name):
        trigger = dash.ctx.triggered_id
        if trigger is None or not dash.ctx.triggered[0]["value"]:
            raise PreventUpdate

        cfg = ctx.table(table_name)
        records = load_records(ctx, cfg, unwrap_filter_values(cfg.name, filter_store))
        table, _ = build_table(
            ctx, cfg, records, selection=unwrap_selection(cfg.name, selection_store)
        )

        if trigger["type"] == IDs.Pattern.EXPORT_SINGLE:
            result = table.export()
        else:
            result = table.export(trigger["key"])

        download = no_update
        if isinstance(result, Ok) and isinstance(result.value, ExportArtifact):
            artifact = result.value
            download = dcc.send_string(artifact.content, artifact.filename, type=artifact.mime_type)

        return download, make_toast(notification_for(result))
