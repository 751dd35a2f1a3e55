from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import dash
import dash_bootstrap_components as dbc
from dash import ALL, Input, Output, State, html, no_update
from dash.exceptions import PreventUpdate

from yushan_admin.core.results import NeedsConfirmation, Ok, notification_for
from yushan_admin.core.table import DataTable
from yushan_admin.ui.helpers import (
    build_table,
    load_records,
    make_toast,
    unwrap_filter_values,
    unwrap_selection,
    wrap_selection,
)
from yushan_admin.ui.ids import IDs, bulk_action_id, quick_action_id

if TYPE_CHECKING:
    from yushan_admin.ui.config import AppConfig

logger = logging.getLogger(__name__)


def _menu_label(item):
    label = [item["label"]]
    if item["icon"]:
        label.insert(0, html.I(className=f"bi bi-{item['icon']} me-2", style={"color": item["color"]}))
    return label


def build_bulk_menu(table: DataTable):
    """Quick Approve / Delete buttons (default catalog only) plus the full actions menu."""
    dispatcher = table.dispatcher
    children = [
        dbc.Button(
            quick.text,
            id=quick_action_id(quick.action.key),
            color="danger" if quick.action.danger else "success",
            outline=True,
            size="sm",
            className="me-1",
        )
        for quick in dispatcher.quick_actions()
    ]
    if table.options.show_bulk_actions_dropdown:
        children.append(
            dbc.DropdownMenu(
                label="Bulk Actions",
                size="sm",
                color="secondary",
                children=[
                    dbc.DropdownMenuItem(
                        _menu_label(item),
                        id=bulk_action_id(item["key"]),
                        disabled=item["disabled"],
                    )
                    for item in dispatcher.menu_items()
                ],
            )
        )
    return children


def register_bulk_action_callbacks(app: dash.Dash, ctx: AppConfig) -> None:
    @app.callback(
        Output(IDs.Control.BULK_MENU_CONTAINER, "children"),
        Input(IDs.Control.TABLE_SELECT, "value"),
    )
    def update_bulk_menu(table_name):
        cfg = ctx.table(table_name)
        table, _ = build_table(ctx, cfg, [])
        return build_bulk_menu(table)

    @app.callback(
        Output(IDs.Store.SELECTION, "data", allow_duplicate=True),
        Output(IDs.Store.DATA_VERSION, "data"),
        Output(IDs.Control.BULK_TOASTS, "children"),
        Output(IDs.Control.CONFIRM_MODAL, "is_open"),
        Output(IDs.Control.CONFIRM_TITLE, "children"),
        Output(IDs.Control.CONFIRM_BODY, "children"),
        Output(IDs.Control.CONFIRM_OK, "children"),
        Output(IDs.Control.CONFIRM_OK, "color"),
        Output(IDs.Store.PENDING_ACTION, "data"),
        Input({"type": IDs.Pattern.BULK_ACTION, "key": ALL}, "n_clicks"),
        Input({"type": IDs.Pattern.QUICK_ACTION, "key": ALL}, "n_clicks"),
        Input(IDs.Control.CONFIRM_OK, "n_clicks"),
        Input(IDs.Control.CONFIRM_CANCEL, "n_clicks"),
        State(IDs.Store.SELECTION, "data"),
        State(IDs.Store.PENDING_ACTION, "data"),
        State(IDs.Store.FILTER_VALUES, "data"),
        State(IDs.Store.DATA_VERSION, "data"),
        State(IDs.Control.TABLE_SELECT, "value"),
        prevent_initial_call=True,
    )
    def dispatch_bulk_action(
            _menu_clicks,
            _quick_clicks,
            _ok_clicks,
            _cancel_clicks,
            selection_store,
            pending,
            filter_store,
            data_version,
            table_name,
    ):
        trigger = dash.ctx.triggered_id
        # freshly rendered buttons report n_clicks=None
        if trigger is None or not dash.ctx.triggered[0]["value"]:
            raise PreventUpdate

        cfg = ctx.table(table_name)
        records = load_records(ctx, cfg, unwrap_filter_values(cfg.name, filter_store))
        selection = unwrap_selection(cfg.name, selection_store)
        table, _ = build_table(ctx, cfg, records, selection=selection)

        if trigger in (IDs.Control.CONFIRM_OK, IDs.Control.CONFIRM_CANCEL):
            if not pending or pending.get("table") != cfg.name:
                raise PreventUpdate
            result = table.confirm_bulk_action(
                pending["key"],
                accepted=trigger == IDs.Control.CONFIRM_OK,
            )
        else:
            result = table.run_bulk_action(trigger["key"])

        if isinstance(result, NeedsConfirmation):
            prompt = result.prompt
            return (
                no_update,
                no_update,
                [],
                True,
                prompt.title,
                prompt.content,
                prompt.ok_text,
                "danger" if prompt.danger else "primary",
                {"table": cfg.name, "key": prompt.action_key},
            )

        succeeded = isinstance(result, Ok)
        return (
            wrap_selection(cfg.name, table.selection) if succeeded else no_update,
            (data_version or 0) + 1 if succeeded else no_update,
            make_toast(notification_for(result)),
            False,
            no_update,
            no_update,
            no_update,
            no_update,
            None,
        )
