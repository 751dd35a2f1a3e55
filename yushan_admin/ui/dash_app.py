from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import dash_bootstrap_components as dbc
from dash import Dash

from yushan_admin.config.loader import load_global_config
from yushan_admin.core.actions import ActionLoadingMap
from yushan_admin.services.preference_store import LocalFilePreferenceStore, PreferenceStore
from yushan_admin.services.user_service import UserServiceManager
from yushan_admin.ui.callbacks.callbacks_bulk_actions import register_bulk_action_callbacks
from yushan_admin.ui.callbacks.callbacks_columns import register_column_callbacks
from yushan_admin.ui.callbacks.callbacks_export import register_export_callbacks
from yushan_admin.ui.callbacks.callbacks_filters import register_filter_callbacks
from yushan_admin.ui.callbacks.callbacks_table import register_table_callbacks
from yushan_admin.ui.config import AppConfig
from yushan_admin.ui.layout.build_layout import build_layout

logger = logging.getLogger(__name__)


def build_app_config(config_root: Path | str) -> AppConfig:
    config_root = Path(config_root)

    # 1) Load config
    global_config = load_global_config(config_root)
    tables = {t.name: t for t in global_config.tables}

    # 2) Data services, loaded lazily per table
    services = UserServiceManager(
        {name: cfg.data_file for name, cfg in tables.items()},
        row_keys={name: cfg.row_key for name, cfg in tables.items()},
    )

    # 3) Column preferences: server-side when a directory is configured
    preference_store: Optional[PreferenceStore] = None
    if global_config.preference_dir is not None:
        preference_store = LocalFilePreferenceStore(global_config.preference_dir)

    ctx = AppConfig(
        config_root=config_root,
        global_config=global_config,
        tables=tables,
        default_table=global_config.default_table,
        services=services,
        preference_store=preference_store,
        action_loading={name: ActionLoadingMap() for name in tables},
    )
    ctx.validate()
    return ctx


def create_dash_app(config_root: Path | str | None = None) -> Dash:
    if config_root is None:
        config_root = os.getenv("YUSHAN_ADMIN_CONFIG", "config")
    ctx = build_app_config(config_root)

    logger.info(
        "Starting admin app",
        extra={
            "config_root": str(ctx.config_root),
            "tables": list(ctx.tables),
            "default_table": ctx.default_table,
            "server_side_prefs": ctx.preference_store is not None,
        },
    )

    app = Dash(
        __name__,
        external_stylesheets=[dbc.themes.FLATLY, dbc.icons.BOOTSTRAP],
        # filter and bulk-action controls are created per table
        suppress_callback_exceptions=True,
    )
    app.title = ctx.global_config.ui_title
    app.layout = build_layout(ctx)

    register_table_callbacks(app, ctx)
    register_column_callbacks(app, ctx)
    register_filter_callbacks(app, ctx)
    register_bulk_action_callbacks(app, ctx)
    register_export_callbacks(app, ctx)

    return app
