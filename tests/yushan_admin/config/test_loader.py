from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from yushan_admin.config.loader import load_global_config, load_table_configs
from yushan_admin.config.model import TableConfig
from yushan_admin.core.exceptions import ConfigError
from yushan_admin.core.filters import FilterType


def _table_entry(name="users", **overrides):
    entry = {
        "name": name,
        "title": name.title(),
        "data_file": f"data/{name}.csv",
        "preset": "admin",
        "columns": [
            {"key": "id", "title": "ID", "required": True},
            {"dataIndex": "username", "title": "Username"},
        ],
        "filters": ["search", {"key": "status", "type": "select", "quick_filter": True}],
    }
    entry.update(overrides)
    return entry


def _make_config_root(tmp_path: Path, tables, global_json=None) -> Path:
    # root/
    #   global.json
    #   tables/<name>.json
    root = tmp_path / "config"
    tables_dir = root / "tables"
    tables_dir.mkdir(parents=True)
    (root / "global.json").write_text(json.dumps(global_json or {"ui_title": "Test Admin"}))
    for file_name, entry in tables.items():
        body = entry if isinstance(entry, str) else json.dumps(entry)
        (tables_dir / file_name).write_text(body)
    return root


def test_load_global_config(tmp_path):
    root = _make_config_root(
        tmp_path,
        {"users.json": _table_entry()},
        {"ui_title": "Test Admin", "page_size": 25, "preference_dir": "prefs"},
    )

    cfg = load_global_config(root)

    assert cfg.ui_title == "Test Admin"
    assert cfg.page_size == 25
    assert cfg.default_table == "users"
    assert cfg.preference_dir == (root / "prefs").resolve()

    users = cfg.tables[0]
    assert users.data_file == (root / "data" / "users.csv").resolve()
    assert users.storage_key == "yushan_admin_users_columns"
    assert users.export_filename == "users"
    assert [c.identity for c in users.columns] == ["id", "username"]
    assert users.filters[0].type is FilterType.SEARCH


def test_table_options_follow_preset_and_page_size(tmp_path):
    root = _make_config_root(tmp_path, {"users.json": _table_entry(export_formats=["csv"])})
    users = load_global_config(root).tables[0]

    options = users.options(page_size=20)

    assert options.enable_filters
    assert options.bordered
    assert options.pagination == {"page_size": 20}
    assert list(options.export_formats) == ["csv"]
    assert options.title == "Users"


def test_invalid_tables_are_skipped(tmp_path, caplog):
    root = _make_config_root(
        tmp_path,
        {
            "a_users.json": _table_entry(),
            "b_broken.json": "{not json",
            "c_bad_preset.json": _table_entry("novels", preset="huge"),
            "d_bad_format.json": _table_entry("orders", export_formats=["pdf"]),
            "e_dup_column.json": _table_entry(
                "logs",
                columns=[{"key": "id", "title": "A"}, {"dataIndex": "id", "title": "B"}],
            ),
            "f_bad_filter.json": _table_entry("tags", filters=["nope"]),
            "g_duplicate.json": _table_entry(),
        },
    )

    with caplog.at_level(logging.ERROR):
        tables = load_table_configs(root)

    assert [t.name for t in tables] == ["users"]
    assert len([r for r in caplog.records if r.levelno == logging.ERROR]) == 6


def test_missing_global_json(tmp_path):
    with pytest.raises(ConfigError):
        load_global_config(tmp_path)


def test_no_valid_tables(tmp_path):
    root = _make_config_root(tmp_path, {"broken.json": _table_entry(preset="huge")})
    with pytest.raises(ConfigError):
        load_global_config(root)


def test_unknown_default_table(tmp_path):
    root = _make_config_root(
        tmp_path,
        {"users.json": _table_entry()},
        {"default_table": "novels"},
    )
    with pytest.raises(ConfigError):
        load_global_config(root)


def test_shipped_config_loads():
    root = Path(__file__).resolve().parents[3] / "config"
    cfg = load_global_config(root)

    assert cfg.default_table == "users"
    assert {t.name for t in cfg.tables} == {"users", "novels"}
    novels = next(t for t in cfg.tables if t.name == "novels")
    assert [a.key for a in novels.bulk_actions] == ["approve", "reject", "flag"]
    users = next(t for t in cfg.tables if t.name == "users")
    assert users.disabled_when == {"status": ("banned",)}
    assert users.options().disabled_when == {"status": ("banned",)}


def test_disabled_when_accepts_scalar(tmp_path):
    root = _make_config_root(tmp_path, {"users.json": _table_entry(disabled_when={"status": "banned"})})
    assert load_global_config(root).tables[0].disabled_when == {"status": ("banned",)}


def test_bad_bulk_actions_skip_only_that_table(tmp_path):
    root = _make_config_root(
        tmp_path,
        {
            "a_users.json": _table_entry(),
            "b_no_key.json": _table_entry("novels", bulk_actions=[{"label": "No key"}]),
            "c_dup_key.json": _table_entry(
                "orders",
                bulk_actions=[{"key": "approve"}, {"key": "reject"}, {"key": "approve"}],
            ),
        },
    )

    assert [t.name for t in load_table_configs(root)] == ["users"]


def test_duplicate_action_keys_raise_config_error(tmp_path):
    raw = _table_entry(bulk_actions=[{"key": "approve"}, {"key": "approve"}])
    with pytest.raises(ConfigError, match="Duplicate bulk action keys"):
        TableConfig.from_raw(raw, source_path=tmp_path / "tables" / "users.json")
