from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import dash
from dash import ALL, Input, Output, State, no_update
from dash.exceptions import PreventUpdate

from yushan_admin.config.model import TableConfig
from yushan_admin.core.filters import FilterComposer
from yushan_admin.ui.helpers import unwrap_filter_values
from yushan_admin.ui.ids import IDs
from yushan_admin.ui.layout.build_filter_panel import build_filter_fields, build_filter_tags

if TYPE_CHECKING:
    from yushan_admin.ui.config import AppConfig

logger = logging.getLogger(__name__)

HIDDEN = {"display": "none"}


def make_composer(cfg: TableConfig, values: Optional[Dict[str, Any]] = None) -> Optional[FilterComposer]:
    if not cfg.filters:
        return None
    return FilterComposer(cfg.filters, initial_values=values)


def _by_key(entries: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {e["id"]["key"]: e.get("value") for e in entries}


def collect_control_values(inputs_list: List[Any]) -> Dict[str, Any]:
    """
    Fold the pattern-matched control values into one filter value map.

    ``inputs_list`` follows the Input order of ``update_filter_values``:
    plain values, single dates, range starts, range ends, number mins, number maxes.
    """
    plain, dates, starts, ends, mins, maxes = (_by_key(entries) for entries in inputs_list[:6])

    values: Dict[str, Any] = {}
    values.update(plain)
    values.update(dates)
    for key in set(starts) | set(ends):
        start, end = starts.get(key), ends.get(key)
        values[key] = [start, end] if start or end else None
    for key in set(mins) | set(maxes):
        lo, hi = mins.get(key), maxes.get(key)
        values[key] = {"min": lo, "max": hi} if lo is not None or hi is not None else None
    return values


def register_filter_callbacks(app: dash.Dash, ctx: AppConfig) -> None:
    # ---------------------------------------------------------
    # Build controls for the active table (and after reset / tag removal)
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Control.FILTER_QUICK, "children"),
        Output(IDs.Control.FILTER_ADVANCED, "children"),
        Output(IDs.Control.FILTER_PANEL, "style"),
        Output(IDs.Control.FILTER_ADVANCED_TOGGLE, "style"),
        Input(IDs.Store.FILTER_PANEL_VERSION, "data"),
        State(IDs.Control.TABLE_SELECT, "value"),
        State(IDs.Store.FILTER_VALUES, "data"),
    )
    def build_filter_controls(_version, table_name, filter_store):
        cfg = ctx.table(table_name)
        composer = make_composer(cfg, unwrap_filter_values(cfg.name, filter_store))
        if composer is None:
            return [], [], HIDDEN, HIDDEN
        quick, advanced = build_filter_fields(composer)
        return quick, advanced, {}, {} if advanced else HIDDEN

    # ---------------------------------------------------------
    # Control changes, reset, tag removal, table switch -> value store
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Store.FILTER_VALUES, "data"),
        Output(IDs.Store.FILTER_PANEL_VERSION, "data"),
        Input({"type": IDs.Pattern.FILTER_VALUE, "key": ALL}, "value"),
        Input({"type": IDs.Pattern.FILTER_DATE, "key": ALL}, "date"),
        Input({"type": IDs.Pattern.FILTER_DATERANGE, "key": ALL}, "start_date"),
        Input({"type": IDs.Pattern.FILTER_DATERANGE, "key": ALL}, "end_date"),
        Input({"type": IDs.Pattern.FILTER_NUM_MIN, "key": ALL}, "value"),
        Input({"type": IDs.Pattern.FILTER_NUM_MAX, "key": ALL}, "value"),
        Input({"type": IDs.Pattern.FILTER_TAG, "key": ALL}, "n_clicks"),
        Input(IDs.Control.FILTER_RESET, "n_clicks"),
        Input(IDs.Control.TABLE_SELECT, "value"),
        State(IDs.Store.FILTER_VALUES, "data"),
        State(IDs.Store.FILTER_PANEL_VERSION, "data"),
    )
    def update_filter_values(*args):
        table_name, filter_store, version = args[-3], args[-2], args[-1]
        cfg = ctx.table(table_name)
        trigger = dash.ctx.triggered_id
        version = version or 0

        if trigger is None or trigger == IDs.Control.TABLE_SELECT:
            # table switch starts from a clean slate
            rebuild = version + 1 if trigger is not None else no_update
            return {"table": cfg.name, "values": {}}, rebuild

        composer = make_composer(cfg, unwrap_filter_values(cfg.name, filter_store))
        if composer is None:
            raise PreventUpdate

        if trigger == IDs.Control.FILTER_RESET:
            if not dash.ctx.triggered[0]["value"]:
                raise PreventUpdate
            values = composer.reset()
            logger.info("Filters reset", extra={"table": cfg.name})
            return {"table": cfg.name, "values": values}, version + 1

        if isinstance(trigger, dict) and trigger.get("type") == IDs.Pattern.FILTER_TAG:
            if not dash.ctx.triggered[0]["value"]:
                raise PreventUpdate
            values = composer.remove(trigger["key"])
            return {"table": cfg.name, "values": values}, version + 1

        values = composer.set_values(collect_control_values(dash.ctx.inputs_list))
        return {"table": cfg.name, "values": values}, no_update

    # ---------------------------------------------------------
    # Active filter summary
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Control.FILTER_TAGS, "children"),
        Output(IDs.Control.FILTER_COUNT, "children"),
        Output(IDs.Control.FILTER_RESET, "disabled"),
        Input(IDs.Store.FILTER_VALUES, "data"),
        State(IDs.Control.TABLE_SELECT, "value"),
    )
    def update_filter_summary(filter_store, table_name):
        cfg = ctx.table(table_name)
        composer = make_composer(cfg, unwrap_filter_values(cfg.name, filter_store))
        if composer is None:
            return [], "0", True
        count = composer.active_count
        return build_filter_tags(composer), str(count), count == 0

    @app.callback(
        Output(IDs.Control.FILTER_ADVANCED_COLLAPSE, "is_open"),
        Input(IDs.Control.FILTER_ADVANCED_TOGGLE, "n_clicks"),
        State(IDs.Control.FILTER_ADVANCED_COLLAPSE, "is_open"),
        prevent_initial_call=True,
    )
    def toggle_advanced(_n_clicks, is_open):
        return not is_open
