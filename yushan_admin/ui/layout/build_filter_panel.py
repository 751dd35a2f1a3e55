from __future__ import annotations

from typing import Any, List, Mapping, Optional, Tuple

import dash_bootstrap_components as dbc
from dash import dcc, html

from yushan_admin.core.filters import FilterComposer, FilterField, FilterType, range_bounds
from yushan_admin.ui.ids import (
    IDs,
    filter_date_id,
    filter_daterange_id,
    filter_num_max_id,
    filter_num_min_id,
    filter_tag_id,
    filter_value_id,
)


def _options(fld: FilterField) -> List[dict]:
    return [{"label": o.label, "value": o.value} for o in fld.options]


def build_filter_control(fld: FilterField, value: Any = None):
    """One input for ``fld``; pattern ids let a single callback read them all."""
    placeholder = fld.placeholder or f"Filter by {fld.label.lower()}"

    if fld.type in (FilterType.TEXT, FilterType.SEARCH):
        return dbc.Input(
            id=filter_value_id(fld.key),
            type="search" if fld.type is FilterType.SEARCH else "text",
            value=value or "",
            placeholder=placeholder,
            debounce=True,
        )
    if fld.type in (FilterType.SELECT, FilterType.MULTISELECT):
        return dcc.Dropdown(
            id=filter_value_id(fld.key),
            options=_options(fld),
            value=value,
            multi=fld.type is FilterType.MULTISELECT or fld.multiple,
            placeholder=placeholder,
        )
    if fld.type is FilterType.NUMBER:
        return dbc.Input(id=filter_value_id(fld.key), type="number", value=value, placeholder=placeholder)
    if fld.type is FilterType.SWITCH:
        return dbc.Switch(id=filter_value_id(fld.key), label=fld.label, value=bool(value))
    if fld.type is FilterType.CHECKBOX:
        return dbc.Checklist(
            id=filter_value_id(fld.key),
            options=_options(fld),
            value=list(value or []),
            inline=True,
        )
    if fld.type is FilterType.DATE:
        return dcc.DatePickerSingle(id=filter_date_id(fld.key), date=value, clearable=True)
    if fld.type is FilterType.DATERANGE:
        start, end = range_bounds(value) if value else (None, None)
        return dcc.DatePickerRange(
            id=filter_daterange_id(fld.key),
            start_date=start,
            end_date=end,
            clearable=True,
        )
    if fld.type is FilterType.NUMBERRANGE:
        lo, hi = range_bounds(value) if value else (None, None)
        return dbc.InputGroup(
            [
                dbc.Input(id=filter_num_min_id(fld.key), type="number", value=lo, placeholder="Min"),
                dbc.InputGroupText("-"),
                dbc.Input(id=filter_num_max_id(fld.key), type="number", value=hi, placeholder="Max"),
            ]
        )
    raise ValueError(f"No control for filter type {fld.type}")


def _field_col(fld: FilterField, values: Mapping[str, Any]) -> dbc.Col:
    children = [build_filter_control(fld, values.get(fld.key))]
    if fld.type is not FilterType.SWITCH:
        children.insert(0, dbc.Label(fld.label, className="small mb-1"))
    return dbc.Col(children, className="mb-2", **fld.col_props)


def build_filter_tags(composer: FilterComposer) -> List[Any]:
    tags = composer.active_filters()
    if not tags:
        return []
    return [
        html.Span("Active filters:", className="me-2 small text-muted"),
        *[
            dbc.Button(
                [tag.text, html.Span(" ×", className="ms-1")],
                id=filter_tag_id(tag.key),
                color="primary",
                outline=True,
                size="sm",
                className="me-1 mb-1",
            )
            for tag in tags
        ],
    ]


def build_filter_fields(composer: Optional[FilterComposer]) -> Tuple[List[dbc.Col], List[dbc.Col]]:
    """Quick and advanced field columns for the current values."""
    if composer is None:
        return [], []
    values = composer.values
    quick = [_field_col(f, values) for f in composer.quick_fields]
    advanced = [_field_col(f, values) for f in composer.advanced_fields]
    return quick, advanced


def build_filter_panel() -> dbc.Card:
    """
    Static skeleton. Field rows are filled per table by the filter callbacks;
    the card is hidden for tables without filters.
    """
    return dbc.Card(
        id=IDs.Control.FILTER_PANEL,
        className="mb-3",
        style={"display": "none"},
        children=dbc.CardBody(
            [
                dbc.Row(
                    [
                        dbc.Col(html.H6("Filters", className="mb-0"), width="auto"),
                        dbc.Col(
                            dbc.Badge("0", id=IDs.Control.FILTER_COUNT, color="primary", pill=True),
                            width="auto",
                        ),
                        dbc.Col(
                            [
                                dbc.Button(
                                    "Advanced Filters",
                                    id=IDs.Control.FILTER_ADVANCED_TOGGLE,
                                    color="secondary",
                                    outline=True,
                                    size="sm",
                                    className="me-2",
                                ),
                                dbc.Button(
                                    "Reset",
                                    id=IDs.Control.FILTER_RESET,
                                    color="link",
                                    size="sm",
                                    disabled=True,
                                ),
                            ],
                            className="ms-auto text-end",
                            width="auto",
                        ),
                    ],
                    className="align-items-center mb-2",
                ),
                dbc.Row(id=IDs.Control.FILTER_QUICK, className="g-2"),
                dbc.Collapse(
                    dbc.Row(id=IDs.Control.FILTER_ADVANCED, className="g-2"),
                    id=IDs.Control.FILTER_ADVANCED_COLLAPSE,
                    is_open=False,
                ),
                html.Div(id=IDs.Control.FILTER_TAGS, className="mt-2"),
            ]
        ),
    )
