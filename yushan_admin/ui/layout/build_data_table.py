from __future__ import annotations

import dash_bootstrap_components as dbc
from dash import dash_table, dcc, html

from yushan_admin.ui.ids import IDs


def build_column_selector() -> html.Div:
    """Columns button with a popover: search, show/hide all, per-column checkboxes, reset."""
    return html.Div(
        [
            dbc.Button("Columns", id=IDs.Control.COLUMN_MENU, color="secondary", outline=True, size="sm"),
            dbc.Popover(
                [
                    dbc.PopoverHeader("Show / hide columns"),
                    dbc.PopoverBody(
                        [
                            dbc.Input(
                                id=IDs.Control.COLUMN_SEARCH,
                                type="search",
                                placeholder="Search columns...",
                                size="sm",
                                className="mb-2",
                            ),
                            dbc.Checkbox(id=IDs.Control.COLUMN_MASTER, label="Hide All", value=True),
                            html.Hr(className="my-2"),
                            dbc.Checklist(id=IDs.Control.COLUMN_CHECKLIST, options=[], value=[]),
                            html.Hr(className="my-2"),
                            html.Div(
                                [
                                    html.Small(id=IDs.Control.COLUMN_SUMMARY, className="text-muted"),
                                    dbc.Button(
                                        "Reset",
                                        id=IDs.Control.COLUMN_RESET,
                                        color="link",
                                        size="sm",
                                        className="p-0",
                                    ),
                                ],
                                className="d-flex justify-content-between align-items-center",
                            ),
                        ],
                        style={"minWidth": "240px"},
                    ),
                ],
                target=IDs.Control.COLUMN_MENU,
                trigger="legacy",
                placement="bottom-end",
            ),
        ],
        className="ms-2",
    )


def build_bulk_bar() -> html.Div:
    return html.Div(
        id=IDs.Control.BULK_BAR,
        style={"display": "none"},
        className="d-flex align-items-center",
        children=[
            html.Span(id=IDs.Control.BULK_COUNT, className="me-2 small fw-semibold"),
            html.Div(id=IDs.Control.BULK_MENU_CONTAINER, className="d-flex align-items-center"),
        ],
    )


def build_confirm_modal() -> dbc.Modal:
    return dbc.Modal(
        [
            dbc.ModalHeader(dbc.ModalTitle(id=IDs.Control.CONFIRM_TITLE)),
            dbc.ModalBody(id=IDs.Control.CONFIRM_BODY),
            dbc.ModalFooter(
                [
                    dbc.Button("Cancel", id=IDs.Control.CONFIRM_CANCEL, color="secondary", outline=True),
                    dbc.Button("Confirm", id=IDs.Control.CONFIRM_OK, color="primary"),
                ]
            ),
        ],
        id=IDs.Control.CONFIRM_MODAL,
        is_open=False,
        centered=True,
    )


def build_data_table() -> dbc.Card:
    header = html.Div(
        id=IDs.Control.TABLE_HEADER,
        className="d-flex align-items-center mb-2",
        children=[
            html.H5(id=IDs.Control.TABLE_TITLE, className="mb-0 me-3"),
            build_bulk_bar(),
            html.Div(
                [
                    html.Div(id=IDs.Control.EXPORT_CONTAINER),
                    build_column_selector(),
                ],
                className="ms-auto d-flex align-items-center",
            ),
        ],
    )

    grid = dash_table.DataTable(
        id=IDs.Control.GRID,
        data=[],
        columns=[],
        row_selectable="multi",
        selected_rows=[],
        page_action="native",
        page_current=0,
        page_size=10,
        sort_action="native",
        style_table={"overflowX": "auto"},
        style_cell={"textAlign": "left", "padding": "6px", "fontSize": "0.9rem"},
        style_header={"fontWeight": "600", "backgroundColor": "#fafafa"},
    )

    footer = html.Div(
        [
            html.Small(id=IDs.Control.FOOTER, className="text-muted"),
            html.Small(id=IDs.Control.PAGE_SUMMARY, className="text-muted ms-auto"),
        ],
        className="d-flex mt-2",
    )

    return dbc.Card(
        dbc.CardBody(
            [
                header,
                grid,
                footer,
                dcc.Download(id=IDs.Control.EXPORT_DOWNLOAD),
                html.Div(id=IDs.Control.BULK_TOASTS),
                html.Div(id=IDs.Control.EXPORT_TOASTS),
                build_confirm_modal(),
            ]
        ),
        className="mb-3",
    )
