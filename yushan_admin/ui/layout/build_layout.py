from __future__ import annotations

from typing import TYPE_CHECKING

import dash_bootstrap_components as dbc
from dash import dcc

from yushan_admin.ui.ids import IDs
from yushan_admin.ui.layout.build_data_table import build_data_table
from yushan_admin.ui.layout.build_filter_panel import build_filter_panel
from yushan_admin.ui.layout.build_navbar import build_navbar

if TYPE_CHECKING:
    from yushan_admin.ui.config import AppConfig


def build_layout(ctx: AppConfig):
    return dbc.Container(
        fluid=True,
        className="ya-root",
        children=[
            build_navbar(ctx),

            # App-level stores
            dcc.Store(id=IDs.Store.SELECTION, storage_type="memory"),
            dcc.Store(id=IDs.Store.FILTER_VALUES, storage_type="memory"),
            dcc.Store(id=IDs.Store.FILTER_PANEL_VERSION, storage_type="memory", data=0),
            dcc.Store(id=IDs.Store.PENDING_ACTION, storage_type="memory"),
            dcc.Store(id=IDs.Store.DATA_VERSION, storage_type="memory", data=0),
            # column visibility survives reloads, like localStorage
            dcc.Store(id=IDs.Store.COLUMN_PREFS, storage_type="local"),

            dbc.Row(
                dbc.Col(
                    [
                        build_filter_panel(),
                        build_data_table(),
                    ],
                    className="mt-3",
                ),
            ),
        ],
    )
