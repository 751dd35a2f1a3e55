from __future__ import annotations

import dash_bootstrap_components as dbc

from yushan_admin.core.columns import ColumnDescriptor
from yushan_admin.core.results import Notification
from yushan_admin.core.selection import SelectionState
from yushan_admin.ui.callbacks.callbacks_filters import collect_control_values
from yushan_admin.ui.helpers import (
    disabled_row_styles,
    grid_columns,
    grid_rows,
    make_toast,
    unwrap_filter_values,
    unwrap_selection,
    wrap_selection,
)


def test_make_toast_levels():
    assert make_toast(None) == []
    toast = make_toast(Notification("error", "Failed to approve selected"))[0]
    assert isinstance(toast, dbc.Toast)
    assert toast.icon == "danger"
    assert toast.header == "Error"


def test_grid_rows_add_id_and_flatten_cells():
    rows = grid_rows([{"uuid": "u1", "ok": True, "tags": ["a", "b"]}], row_key="uuid")
    assert rows == [{"uuid": "u1", "ok": "Yes", "tags": "a, b", "id": "u1"}]


def test_grid_columns_use_data_field():
    cols = grid_columns([
        ColumnDescriptor("ID", key="id"),
        ColumnDescriptor("Joined", key="joined", data_index="join_date", extra={"type": "datetime"}),
    ])
    assert cols == [
        {"name": "ID", "id": "id"},
        {"name": "Joined", "id": "join_date", "type": "datetime"},
    ]


def test_disabled_row_styles_quote_string_keys():
    styles = disabled_row_styles([{"id": "a", "disabled": True}, {"id": "b"}], "id")
    assert len(styles) == 1
    assert styles[0]["if"] == {"filter_query": '{id} = "a"'}


def test_stores_are_scoped_to_table():
    sel = SelectionState((1,), ({"id": 1},))
    stored = wrap_selection("users", sel)

    assert unwrap_selection("users", stored) == sel
    assert unwrap_selection("novels", stored).is_empty
    assert unwrap_filter_values("users", {"table": "users", "values": {"status": "active"}}) == {"status": "active"}
    assert unwrap_filter_values("novels", {"table": "users", "values": {"status": "active"}}) == {}


def _entries(type_, **values):
    return [{"id": {"type": type_, "key": k}, "property": "value", "value": v} for k, v in values.items()]


def test_collect_control_values():
    inputs_list = [
        _entries("filter-value", search="bob", status=None),
        _entries("filter-date", created="2024-03-09"),
        _entries("filter-daterange", join_date="2024-01-01", empty=None),
        _entries("filter-daterange", join_date="2024-01-31", empty=None),
        _entries("filter-num-min", novels=1, chapters=None),
        _entries("filter-num-max", novels=None, chapters=None),
        [],
        [],
        [],
    ]

    values = collect_control_values(inputs_list)

    assert values == {
        "search": "bob",
        "status": None,
        "created": "2024-03-09",
        "join_date": ["2024-01-01", "2024-01-31"],
        "empty": None,
        "novels": {"min": 1, "max": None},
        "chapters": None,
    }
