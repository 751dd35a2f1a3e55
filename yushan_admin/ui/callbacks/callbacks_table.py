from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import dash
from dash import Input, Output, State, no_update

from yushan_admin.ui.helpers import (
    build_table,
    disabled_row_styles,
    grid_columns,
    grid_rows,
    load_records,
    unwrap_filter_values,
    unwrap_selection,
    wrap_selection,
)
from yushan_admin.ui.ids import IDs

if TYPE_CHECKING:
    from yushan_admin.ui.config import AppConfig

logger = logging.getLogger(__name__)

HIDDEN = {"display": "none"}


def _log_table_change(table_name: str):
    def on_change(pagination, filters, sorter):
        logger.debug(
            "Table change",
            extra={"table": table_name, "pagination": pagination, "sorter": sorter},
        )

    return on_change


def register_table_callbacks(app: dash.Dash, ctx: AppConfig) -> None:
    # ---------------------------------------------------------
    # Grid contents: data, visible columns, re-applied selection
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Control.GRID, "data"),
        Output(IDs.Control.GRID, "columns"),
        Output(IDs.Control.GRID, "selected_rows"),
        Output(IDs.Control.GRID, "page_size"),
        Output(IDs.Control.GRID, "page_current"),
        Output(IDs.Control.GRID, "row_selectable"),
        Output(IDs.Control.GRID, "style_data_conditional"),
        Output(IDs.Control.TABLE_TITLE, "children"),
        Input(IDs.Control.TABLE_SELECT, "value"),
        Input(IDs.Store.FILTER_VALUES, "data"),
        Input(IDs.Store.COLUMN_PREFS, "data"),
        Input(IDs.Store.DATA_VERSION, "data"),
        State(IDs.Store.SELECTION, "data"),
        State(IDs.Control.GRID, "page_current"),
    )
    def render_grid(table_name, filter_store, prefs, _data_version, selection_store, current_page):
        cfg = ctx.table(table_name)
        records = load_records(ctx, cfg, unwrap_filter_values(cfg.name, filter_store))
        selection = unwrap_selection(cfg.name, selection_store)
        table, _ = build_table(ctx, cfg, records, selection=selection, prefs=prefs)

        pagination = table.pagination()
        page_size = pagination["page_size"] if pagination else max(len(records), 1)
        trigger = dash.ctx.triggered_id
        if trigger in (None, IDs.Control.TABLE_SELECT, IDs.Store.FILTER_VALUES):
            page_current = 0
        elif trigger == IDs.Store.DATA_VERSION:
            # rows may have been deleted under the current page
            page_current = table.clamp_page(current_page)
        else:
            page_current = no_update

        logger.debug(
            "Rendering table",
            extra={"table": cfg.name, "n_records": len(records), "n_selected": selection.count},
        )

        return (
            grid_rows(records, cfg.row_key),
            grid_columns(table.final_columns()),
            selection.indices_in(records, cfg.row_key),
            page_size,
            page_current,
            "multi" if table.options.enable_selection else False,
            disabled_row_styles(records, cfg.row_key, table.is_row_disabled),
            cfg.title,
        )

    # ---------------------------------------------------------
    # Checkbox changes -> selection store
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Store.SELECTION, "data"),
        Input(IDs.Control.GRID, "selected_rows"),
        State(IDs.Control.GRID, "data"),
        State(IDs.Control.TABLE_SELECT, "value"),
    )
    def update_selection(selected_rows, grid_data, table_name):
        cfg = ctx.table(table_name)
        grid_data = grid_data or []
        keys = [grid_data[i]["id"] for i in selected_rows or [] if 0 <= i < len(grid_data)]

        # selection rows are the source records, not the display rows
        records = ctx.services[cfg.name].records()
        position = {r.get(cfg.row_key): i for i, r in enumerate(records)}
        indices = [position[k] for k in keys if k in position]

        table, _ = build_table(ctx, cfg, records)
        selection = table.select_indices(indices)
        return wrap_selection(cfg.name, selection)

    # ---------------------------------------------------------
    # Header / footer chrome
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Control.TABLE_HEADER, "style"),
        Output(IDs.Control.BULK_BAR, "style"),
        Output(IDs.Control.BULK_COUNT, "children"),
        Output(IDs.Control.COLUMN_MENU, "style"),
        Output(IDs.Control.FOOTER, "children"),
        Output(IDs.Control.PAGE_SUMMARY, "children"),
        Input(IDs.Store.SELECTION, "data"),
        Input(IDs.Control.GRID, "data"),
        Input(IDs.Control.GRID, "page_current"),
        Input(IDs.Control.GRID, "sort_by"),
        State(IDs.Control.GRID, "page_size"),
        State(IDs.Control.TABLE_SELECT, "value"),
    )
    def update_chrome(selection_store, grid_data, page_current, sort_by, page_size, table_name):
        cfg = ctx.table(table_name)
        selection = unwrap_selection(cfg.name, selection_store)
        table, _ = build_table(
            ctx, cfg, grid_data or [], selection=selection, on_change=_log_table_change(cfg.name)
        )
        triggered = dash.ctx.triggered_prop_ids
        if f"{IDs.Control.GRID}.page_current" in triggered or f"{IDs.Control.GRID}.sort_by" in triggered:
            table.handle_table_change(
                {"current": (page_current or 0) + 1, "page_size": page_size},
                {},
                {"sort_by": sort_by or []},
            )

        return (
            {} if table.show_header() else HIDDEN,
            {} if table.show_bulk_actions() else HIDDEN,
            f"{selection.count} items selected",
            {} if table.options.enable_column_selector else HIDDEN,
            table.footer_text() or "",
            table.page_summary(page_current or 0),
        )
