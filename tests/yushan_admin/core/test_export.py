from __future__ import annotations

import json
import re
from datetime import datetime, timezone

import pytest

from yushan_admin.core.exceptions import ExportError
from yushan_admin.core.export import (
    DIVIDER,
    EXPORT_PRESETS,
    ExportArtifact,
    ExportEngine,
    build_filename,
    serialize,
    to_csv,
)
from yushan_admin.core.results import Err, Ok, Skipped

FIXED_NOW = datetime(2024, 5, 1, 12, 30, 45, tzinfo=timezone.utc)


def _records(n=3):
    return [{"id": i, "name": f"user_{i}", "active": i % 2 == 0} for i in range(1, n + 1)]


def _make_engine(**kwargs):
    kwargs.setdefault("clock", lambda: FIXED_NOW)
    return ExportEngine(**kwargs)


def test_csv_quotes_commas_and_quotes():
    out = to_csv([{"name": 'A, "B"', "n": 1, "ok": True, "none": None}])
    assert out == 'name,n,ok,none\n"A, ""B""",1,true,'


def test_csv_header_from_first_record_and_empty_input():
    out = to_csv([{"a": 1, "b": 2}, {"b": 3, "c": 4}])
    assert out.splitlines() == ["a,b", "1,2", ",3"]
    assert to_csv([]) == ""


def test_csv_keeps_one_line_per_record():
    out = to_csv(
        [
            {"id": 1, "bio": "line one\nline two", "tags": ["a", "b"]},
            {"id": 2, "bio": "x", "tags": []},
        ]
    )
    assert out.split("\n") == ["id,bio,tags", '1,line one line two,"a, b"', "2,x,"]


def test_json_is_pretty_printed_array():
    out = serialize("json", [{"name": "é"}])
    assert json.loads(out) == [{"name": "é"}]
    assert "é" in out
    assert "\n  " in out


def test_serialize_unknown_format():
    with pytest.raises(ExportError):
        serialize("pdf", [{"a": 1}])


def test_build_filename_pattern():
    assert build_filename("users", "csv", now=FIXED_NOW) == "users_2024-05-01T12-30-45.csv"
    assert build_filename("users", "json", selected=True, now=FIXED_NOW) == "users_selected_2024-05-01T12-30-45.json"


def test_excel_export_builds_artifact():
    engine = _make_engine(filename="users")

    result = engine.export("excel", _records(3))

    assert isinstance(result, Ok)
    assert result.message == "Exported 3 items as EXCEL"
    artifact = result.value
    assert isinstance(artifact, ExportArtifact)
    assert re.fullmatch(r"users_\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}\.xlsx", artifact.filename)
    assert artifact.content.startswith("id,name,active\n1,user_1,false")
    assert engine.loading == {"excel": False}


def test_empty_data_is_disabled_and_skipped():
    engine = _make_engine(formats=["csv"])

    assert engine.is_disabled([])
    result = engine.export("csv", [])

    assert result == Skipped("No data to export")
    assert not engine.is_loading("csv")


def test_sink_receives_serialized_content():
    calls = []
    engine = _make_engine(sink=lambda fmt, records, content: calls.append((fmt, list(records), content)))

    result = engine.export("csv", _records(2))

    assert isinstance(result, Ok)
    assert result.value is None
    assert calls[0][0] == "csv"
    assert calls[0][2].splitlines()[0] == "id,name,active"


def test_sink_failure_is_reported_and_loading_cleared():
    def sink(fmt, records, content):
        raise IOError("disk full")

    engine = _make_engine(sink=sink)
    result = engine.export("json", _records(1))

    assert isinstance(result, Err)
    assert result.message == "Export failed: disk full"
    assert not engine.is_loading("json")


def test_unsupported_format_rejected_at_construction():
    with pytest.raises(ExportError):
        ExportEngine(formats=["csv", "pdf"])


def test_menu_items_split_all_and_selected():
    engine = _make_engine(formats=["csv", "json"])
    data, selected = _records(4), _records(1)

    items = engine.menu_items(data, selected)

    assert [i.key for i in items] == ["all_csv", "all_json", "divider", "selected_csv", "selected_json"]
    assert items[2] == DIVIDER
    assert items[0].label == "Export All as CSV"
    assert items[0].count == 4
    assert items[-1].count == 1
    assert [i.key for i in engine.menu_items(data, [])] == ["all_csv", "all_json"]


def test_menu_choice_selected_scope_marks_filename():
    engine = _make_engine(filename="report", formats=["csv", "json"])

    result = engine.export_menu_choice("selected_json", _records(4), _records(2))

    assert result.message == "Exported 2 items as JSON"
    assert result.value.filename == "report_selected_2024-05-01T12-30-45.json"


def test_single_format_mode():
    engine = _make_engine(filename="novels", formats=["csv"])

    assert engine.single_format
    assert engine.button_label() == "Export CSV"
    assert not engine.is_disabled(_records(1))

    result = engine.export_single(_records(3), _records(3)[:1])
    assert result.message == "Exported 1 items as CSV"
    assert result.value.filename.startswith("novels_selected_")


def test_presets_match_known_formats():
    assert EXPORT_PRESETS["comprehensive"]["formats"] == ["csv", "excel", "json", "txt"]
    for preset in EXPORT_PRESETS.values():
        ExportEngine(**preset)
