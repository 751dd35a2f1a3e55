from __future__ import annotations

import pytest

from yushan_admin.core.actions import (
    DEFAULT_ACTIONS,
    ActionDescriptor,
    ActionLoadingMap,
    BulkActionDispatcher,
)
from yushan_admin.core.results import Err, NeedsConfirmation, Ok, Skipped
from yushan_admin.core.selection import SelectionState


def _selection(*keys):
    return SelectionState(tuple(keys), tuple({"id": k} for k in keys))


class _RecordingHandler:
    def __init__(self, fail=False):
        self.calls = []
        self.fail = fail

    def __call__(self, key, keys, rows):
        self.calls.append((key, keys, rows))
        if self.fail:
            raise RuntimeError("backend down")
        return {"updated": len(keys)}


def test_default_catalog_keys_and_labels():
    assert [a.key for a in DEFAULT_ACTIONS] == ["approve", "reject", "delete", "export", "flag", "ban_users"]
    dispatcher = BulkActionDispatcher(_RecordingHandler())
    assert dispatcher.uses_default_catalog
    assert dispatcher.get("ban_users").danger
    assert [q.text for q in dispatcher.quick_actions()] == ["Approve", "Delete"]


def test_approve_runs_handler_and_reports_count():
    handler = _RecordingHandler()
    dispatcher = BulkActionDispatcher(handler)

    result = dispatcher.trigger("approve", _selection(1, 2))

    assert isinstance(result, Ok)
    assert result.message == "Approve Selected completed for 2 items"
    assert result.value == {"updated": 2}
    assert handler.calls == [("approve", [1, 2], [{"id": 1}, {"id": 2}])]
    assert dispatcher.loading == {"approve": False}


def test_reject_needs_confirmation_before_running():
    handler = _RecordingHandler()
    dispatcher = BulkActionDispatcher(handler)
    sel = _selection(1, 2, 3)

    result = dispatcher.trigger("reject", sel)

    assert isinstance(result, NeedsConfirmation)
    assert result.prompt.title == "Reject Items"
    assert result.prompt.ok_text == "Reject Selected"
    assert handler.calls == []

    assert dispatcher.confirm("reject", sel, accepted=False) == Skipped()
    assert handler.calls == []

    confirmed = dispatcher.confirm("reject", sel, accepted=True)
    assert confirmed.message == "Reject Selected completed for 3 items"
    assert len(handler.calls) == 1


def test_empty_selection_warns_without_calling_handler():
    handler = _RecordingHandler()
    dispatcher = BulkActionDispatcher(handler)

    result = dispatcher.trigger("delete", SelectionState())

    assert result == Skipped("Please select items to perform bulk action")
    assert handler.calls == []


def test_handler_failure_returns_err_and_clears_loading():
    dispatcher = BulkActionDispatcher(_RecordingHandler(fail=True))

    result = dispatcher.trigger("approve", _selection(7))

    assert isinstance(result, Err)
    assert result.message == "Failed to approve selected"
    assert isinstance(result.error, RuntimeError)
    assert not dispatcher.is_loading("approve")


def test_same_key_cannot_reenter_while_loading():
    inner = {}

    def handler(key, keys, rows):
        inner["result"] = dispatcher.trigger("approve", _selection(1))
        inner["menu"] = {m["key"]: m["disabled"] for m in dispatcher.menu_items()}
        return None

    dispatcher = BulkActionDispatcher(handler)
    dispatcher.trigger("approve", _selection(1))

    assert inner["result"] == Skipped()
    assert inner["menu"]["approve"] is True
    assert inner["menu"]["flag"] is False


def test_shared_loading_map_blocks_second_dispatcher():
    loading = ActionLoadingMap()
    handler = _RecordingHandler()
    second = BulkActionDispatcher(handler, loading=loading)
    inner = {}

    def first_handler(key, keys, rows):
        inner["approve"] = second.trigger("approve", _selection(1))
        inner["flag"] = second.trigger("flag", _selection(1))
        return None

    BulkActionDispatcher(first_handler, loading=loading).trigger("approve", _selection(1))

    assert inner["approve"] == Skipped()
    assert isinstance(inner["flag"], Ok)
    assert handler.calls == [("flag", [1], [{"id": 1}])]
    assert loading.snapshot() == {"approve": False, "flag": False}


def test_loading_map_begin_end():
    loading = ActionLoadingMap()

    assert loading.begin("delete")
    assert not loading.begin("delete")
    assert loading.is_loading("delete")
    loading.end("delete")
    assert not loading.is_loading("delete")


def test_custom_catalog_suppresses_quick_actions():
    actions = [
        ActionDescriptor("publish", "Publish"),
        ActionDescriptor.from_dict({"key": "archive", "label": "Archive", "confirm": True}),
    ]
    dispatcher = BulkActionDispatcher(_RecordingHandler(), actions)

    assert not dispatcher.uses_default_catalog
    assert dispatcher.quick_actions() == []
    prompt = dispatcher.trigger("archive", _selection(1, 2)).prompt
    assert prompt.title == "Confirm Archive"
    assert prompt.content == "Are you sure you want to archive 2 selected items?"


def test_unknown_action_is_skipped():
    result = BulkActionDispatcher(_RecordingHandler()).trigger("nope", _selection(1))
    assert isinstance(result, Skipped)
    assert result.message == "Unknown action: nope"


def test_duplicate_catalog_keys_rejected():
    with pytest.raises(ValueError):
        BulkActionDispatcher(_RecordingHandler(), [ActionDescriptor("a", "A"), ActionDescriptor("a", "B")])
