from __future__ import annotations

import shutil
from pathlib import Path

from yushan_admin.core.filters import COMMON_FILTERS, FilterComposer, FilterField, FilterType
from yushan_admin.core.results import Skipped
from yushan_admin.ui.callbacks.callbacks_bulk_actions import build_bulk_menu
from yushan_admin.ui.callbacks.callbacks_export import build_export_control
from yushan_admin.ui.dash_app import build_app_config, create_dash_app
from yushan_admin.ui.helpers import build_table, load_records
from yushan_admin.ui.layout.build_filter_panel import build_filter_control, build_filter_fields

CONFIG_ROOT = Path(__file__).resolve().parents[3] / "config"


def _copy_config(tmp_path: Path) -> Path:
    root = tmp_path / "config"
    shutil.copytree(CONFIG_ROOT, root)
    return root


def test_create_dash_app_registers_callbacks(tmp_path):
    app = create_dash_app(_copy_config(tmp_path))

    assert app.title == "Yushan Admin"
    assert app.layout is not None
    assert len(app.callback_map) >= 10


def test_config_root_from_env(tmp_path, monkeypatch):
    monkeypatch.setenv("YUSHAN_ADMIN_CONFIG", str(_copy_config(tmp_path)))
    assert create_dash_app().title == "Yushan Admin"


def test_bulk_menu_for_default_and_custom_catalogs(tmp_path):
    ctx = build_app_config(_copy_config(tmp_path))

    users, _ = build_table(ctx, ctx.tables["users"], [])
    novels, _ = build_table(ctx, ctx.tables["novels"], [])

    # quick Approve / Delete buttons + dropdown
    assert len(build_bulk_menu(users)) == 3
    # custom catalog: dropdown only
    assert len(build_bulk_menu(novels)) == 1


def test_export_control_modes(tmp_path):
    ctx = build_app_config(_copy_config(tmp_path))

    users_cfg = ctx.tables["users"]
    users, _ = build_table(ctx, users_cfg, load_records(ctx, users_cfg, {}))
    menu = build_export_control(users, "users")
    assert menu.label == "Export"
    assert [item.id["key"] for item in menu.children] == ["all_csv", "all_excel", "all_json"]

    novels_cfg = ctx.tables["novels"]
    novels, _ = build_table(ctx, novels_cfg, [])
    button = build_export_control(novels, "novels")
    assert button.children == "Export CSV"
    assert button.disabled is True


def test_bulk_action_updates_service(tmp_path):
    ctx = build_app_config(_copy_config(tmp_path))
    cfg = ctx.tables["users"]
    table, _ = build_table(ctx, cfg, load_records(ctx, cfg, {}))
    table.select_indices([1, 2])

    result = table.run_bulk_action("approve")

    assert result.message == "Approve Selected completed for 2 items"
    statuses = {r["id"]: r["status"] for r in ctx.services["users"].records()}
    assert statuses[2] == "active" and statuses[3] == "active"


def test_filter_controls_for_every_type():
    for ftype in FilterType:
        fld = FilterField("k", "K", ftype)
        assert build_filter_control(fld) is not None

    quick, advanced = build_filter_fields(
        FilterComposer([COMMON_FILTERS["search"], COMMON_FILTERS["tags"]])
    )
    assert len(quick) == 1 and len(advanced) == 1


def test_same_action_is_blocked_across_requests(tmp_path):
    ctx = build_app_config(_copy_config(tmp_path))
    cfg = ctx.tables["users"]
    service = ctx.services["users"]
    calls = []
    inner = {}

    def slow_update(key, keys, rows):
        calls.append(key)
        # a second request arrives while the first is still running
        other, _ = build_table(ctx, cfg, load_records(ctx, cfg, {}))
        other.select_indices([1])
        inner["second"] = other.run_bulk_action("approve")
        return {"updated": len(keys)}

    service.bulk_update = slow_update
    table, _ = build_table(ctx, cfg, load_records(ctx, cfg, {}))
    table.select_indices([1])

    first = table.run_bulk_action("approve")

    assert first.message == "Approve Selected completed for 1 items"
    assert isinstance(inner["second"], Skipped)
    assert calls == ["approve"]
    assert not ctx.loading_for("users").is_loading("approve")


def test_export_header_matches_data_file(tmp_path):
    root = _copy_config(tmp_path)
    ctx = build_app_config(root)
    cfg = ctx.tables["users"]
    table, _ = build_table(ctx, cfg, load_records(ctx, cfg, {}))

    artifact = table.export("all_csv").value

    header = (root / "data" / "users.csv").read_text().splitlines()[0]
    assert artifact.content.splitlines()[0] == header
    assert table.row_selection()["disabled_keys"] == [
        r["id"] for r in table.data_source if r["status"] == "banned"
    ]
