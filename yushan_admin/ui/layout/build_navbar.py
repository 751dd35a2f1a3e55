from __future__ import annotations

from typing import TYPE_CHECKING

import dash_bootstrap_components as dbc
from dash import dcc, html

if TYPE_CHECKING:
    from yushan_admin.ui.config import AppConfig

from yushan_admin.ui.ids import IDs


def build_navbar(ctx: AppConfig) -> dbc.Navbar:
    title = ctx.global_config.ui_title
    table_options = [{"label": cfg.title, "value": name} for name, cfg in ctx.tables.items()]

    return dbc.Navbar(
        dbc.Container(
            fluid=True,
            children=[
                html.Div(
                    [
                        html.H3(title, className="mb-0"),
                        html.Small("Admin console", className="text-muted"),
                    ],
                    className="d-flex flex-column justify-content-center",
                ),
                html.Div(
                    [
                        html.Div("Active Table", className="navbar-table-title"),
                        dcc.Dropdown(
                            id=IDs.Control.TABLE_SELECT,
                            options=table_options,
                            value=ctx.default_table,
                            clearable=False,
                            placeholder="Select table",
                            className="mt-1",
                        ),
                    ],
                    className="ms-auto",
                    style={"minWidth": "260px", "marginRight": "24px"},
                ),
            ],
        ),
        dark=False,
        className="shadow-sm ya-navbar",
    )
