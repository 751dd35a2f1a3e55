from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union


@dataclass(frozen=True)
class Notification:
    """
    A toast the UI layer should show.

    - level: one of "success", "info", "warning", "error"
    - message: human readable text
    """
    level: str
    message: str


@dataclass(frozen=True)
class Ok:
    message: str
    value: Any = None


@dataclass(frozen=True)
class Err:
    message: str
    error: Optional[BaseException] = None


@dataclass(frozen=True)
class Skipped:
    """Nothing ran. Used for user guards (empty selection, no data, already loading)."""
    message: str = ""


@dataclass(frozen=True)
class ConfirmationPrompt:
    action_key: str
    title: str
    content: str
    ok_text: str
    danger: bool = False


@dataclass(frozen=True)
class NeedsConfirmation:
    prompt: ConfirmationPrompt


Result = Union[Ok, Err, Skipped, NeedsConfirmation]


def notification_for(result: Result) -> Optional[Notification]:
    """
    Translate a result into the toast it should produce.
    Silent skips and pending confirmations produce no toast.
    """
    if isinstance(result, Ok):
        return Notification("success", result.message)
    if isinstance(result, Err):
        return Notification("error", result.message)
    if isinstance(result, Skipped) and result.message:
        return Notification("warning", result.message)
    return None
