from __future__ import annotations

from yushan_admin.core.results import (
    ConfirmationPrompt,
    Err,
    NeedsConfirmation,
    Notification,
    Ok,
    Skipped,
    notification_for,
)


def test_notification_levels():
    assert notification_for(Ok("done")) == Notification("success", "done")
    assert notification_for(Err("boom")) == Notification("error", "boom")
    assert notification_for(Skipped("nothing selected")) == Notification("warning", "nothing selected")


def test_silent_results_have_no_toast():
    prompt = ConfirmationPrompt("delete", "Delete Items", "Sure?", "Delete")
    assert notification_for(Skipped()) is None
    assert notification_for(NeedsConfirmation(prompt)) is None
