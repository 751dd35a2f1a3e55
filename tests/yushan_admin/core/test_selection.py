from __future__ import annotations

import pytest

from yushan_admin.core.selection import SelectionState, checkbox_props


def _rows():
    return [
        {"id": 1, "name": "alice"},
        {"id": 2, "name": "bob", "disabled": True},
        {"id": 3, "name": "carol"},
    ]


def test_on_change_returns_new_aligned_state():
    rows = _rows()
    st = SelectionState()

    new = st.on_change([1, 3], [rows[0], rows[2]])

    assert st.is_empty
    assert new.selected_keys == (1, 3)
    assert new.selected_rows == (rows[0], rows[2])
    assert new.count == 2


def test_mismatched_lengths_raise_and_leave_previous_state():
    st = SelectionState((1,), ({"id": 1},))

    with pytest.raises(ValueError):
        st.on_change([1, 2], [{"id": 1}])

    assert st.selected_keys == (1,)


def test_clear_empties_both():
    st = SelectionState((1,), ({"id": 1},)).clear()
    assert st.selected_keys == ()
    assert st.selected_rows == ()


def test_checkbox_props_disabled_flag():
    assert checkbox_props({"disabled": True, "name": "x"}) == {"disabled": True, "name": "x"}
    assert checkbox_props({"name": "y"}) == {"disabled": False, "name": "y"}


def test_from_indices_skips_disabled_and_out_of_range():
    st = SelectionState.from_indices(_rows(), [0, 1, 2, 9])

    assert st.selected_keys == (1, 3)
    assert [r["name"] for r in st.selected_rows] == ["alice", "carol"]


def test_indices_in_and_dict_roundtrip():
    rows = _rows()
    st = SelectionState.from_indices(rows, [2, 0])

    assert st.indices_in(rows) == [0, 2]
    assert SelectionState.from_dict(st.to_dict()) == st
    assert SelectionState.from_dict(None).is_empty
