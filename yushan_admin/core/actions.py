from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from yushan_admin.core.results import (
    ConfirmationPrompt,
    Err,
    NeedsConfirmation,
    Ok,
    Result,
    Skipped,
)
from yushan_admin.core.selection import SelectionState

logger = logging.getLogger(__name__)

BulkActionHandler = Callable[[str, List[Any], List[Mapping[str, Any]]], Any]


@dataclass(frozen=True)
class ActionDescriptor:
    """
    One entry of an action catalog.

    - key: unique id passed to the handler
    - label: menu text, also used in notifications
    - icon: icon name rendered next to the label
    - color: css colour for the icon
    - danger: style the confirm button as destructive
    - confirm: require an explicit confirmation before running
    """

    key: str
    label: str
    icon: Optional[str] = None
    color: Optional[str] = None
    danger: bool = False
    confirm: bool = False
    confirm_title: Optional[str] = None
    confirm_content: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ActionDescriptor:
        return cls(
            key=data["key"],
            label=data.get("label", data["key"]),
            icon=data.get("icon"),
            color=data.get("color"),
            danger=bool(data.get("danger", False)),
            confirm=bool(data.get("confirm", False)),
            confirm_title=data.get("confirm_title", data.get("confirmTitle")),
            confirm_content=data.get("confirm_content", data.get("confirmContent")),
        )

    def prompt(self, count: int) -> ConfirmationPrompt:
        return ConfirmationPrompt(
            action_key=self.key,
            title=self.confirm_title or f"Confirm {self.label}",
            content=self.confirm_content
            or f"Are you sure you want to {self.label.lower()} {count} selected items?",
            ok_text=self.label,
            danger=self.danger,
        )


DEFAULT_ACTIONS: Tuple[ActionDescriptor, ...] = (
    ActionDescriptor("approve", "Approve Selected", icon="check", color="#52c41a"),
    ActionDescriptor(
        "reject",
        "Reject Selected",
        icon="x",
        color="#fa8c16",
        confirm=True,
        confirm_title="Reject Items",
        confirm_content="Are you sure you want to reject the selected items? "
                        "This action may notify the creators.",
    ),
    ActionDescriptor(
        "delete",
        "Delete Selected",
        icon="trash",
        color="#ff4d4f",
        danger=True,
        confirm=True,
        confirm_title="Delete Items",
        confirm_content="Are you sure you want to permanently delete the selected items? "
                        "This action cannot be undone.",
    ),
    ActionDescriptor("export", "Export Selected", icon="box-arrow-up", color="#1890ff"),
    ActionDescriptor("flag", "Flag for Review", icon="flag", color="#faad14"),
    ActionDescriptor(
        "ban_users",
        "Ban Users",
        icon="person-x",
        color="#ff4d4f",
        danger=True,
        confirm=True,
        confirm_title="Ban Users",
        confirm_content="Are you sure you want to ban the selected users? "
                        "This will restrict their access to the platform.",
    ),
)

QUICK_ACTIONS = (("approve", "Approve"), ("delete", "Delete"))


@dataclass(frozen=True)
class QuickAction:
    action: ActionDescriptor
    text: str


class ActionLoadingMap:
    """Thread-safe action key -> loading flag, shared by every dispatcher of one table."""

    def __init__(self) -> None:
        self._loading: Dict[str, bool] = {}
        self._lock = threading.Lock()

    def begin(self, key: str) -> bool:
        """Mark `key` loading; False if it already was."""
        with self._lock:
            if self._loading.get(key, False):
                return False
            self._loading[key] = True
            return True

    def end(self, key: str) -> None:
        with self._lock:
            self._loading[key] = False

    def is_loading(self, key: str) -> bool:
        with self._lock:
            return self._loading.get(key, False)

    def snapshot(self) -> Dict[str, bool]:
        with self._lock:
            return dict(self._loading)


class BulkActionDispatcher:
    """
    Runs catalog actions against the current selection.

    Per action key: Idle -> Loading -> (Success | Failure) -> Idle. Keys are
    tracked independently so different actions may overlap; the same key
    can't be re-entered while it is loading.

    Results are returned rather than shown; the UI layer turns them into
    toasts with ``notification_for``.
    """

    def __init__(
            self,
            handler: BulkActionHandler,
            actions: Optional[Sequence[ActionDescriptor]] = None,
            loading: Optional[ActionLoadingMap] = None,
    ) -> None:
        self._handler = handler
        self._custom = bool(actions)
        catalog = tuple(actions) if actions else DEFAULT_ACTIONS
        keys = [a.key for a in catalog]
        if len(keys) != len(set(keys)):
            raise ValueError(f"Duplicate action keys in catalog: {keys}")
        self._catalog: Tuple[ActionDescriptor, ...] = catalog
        self._loading = loading if loading is not None else ActionLoadingMap()

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------
    @property
    def catalog(self) -> Tuple[ActionDescriptor, ...]:
        return self._catalog

    @property
    def uses_default_catalog(self) -> bool:
        return not self._custom

    def get(self, key: str) -> Optional[ActionDescriptor]:
        return next((a for a in self._catalog if a.key == key), None)

    def quick_actions(self) -> List[QuickAction]:
        """Approve / Delete shortcuts; suppressed when a custom catalog is used."""
        if self._custom:
            return []
        return [
            QuickAction(self.get(key), text)
            for key, text in QUICK_ACTIONS
        ]

    def menu_items(self) -> List[Dict[str, Any]]:
        return [
            {
                "key": a.key,
                "label": a.label,
                "icon": a.icon,
                "color": a.color,
                "disabled": self.is_loading(a.key),
            }
            for a in self._catalog
        ]

    # ------------------------------------------------------------------
    # Loading map
    # ------------------------------------------------------------------
    @property
    def loading(self) -> Dict[str, bool]:
        return self._loading.snapshot()

    def is_loading(self, key: str) -> bool:
        return self._loading.is_loading(key)

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------
    def trigger(self, key: str, selection: SelectionState) -> Result:
        """
        Entry point for a menu click or quick button.

        :return: Skipped when nothing is selected or the key is busy,
            NeedsConfirmation for confirm-required actions, otherwise the
            result of execute()
        """
        if selection.is_empty:
            return Skipped("Please select items to perform bulk action")

        action = self.get(key)
        if action is None:
            logger.warning("Unknown bulk action %r", key)
            return Skipped(f"Unknown action: {key}")

        if self.is_loading(key):
            return Skipped()

        if action.confirm:
            return NeedsConfirmation(action.prompt(selection.count))

        return self.execute(key, selection)

    def confirm(self, key: str, selection: SelectionState, accepted: bool) -> Result:
        """Second half of a confirm-required trigger. Declining runs nothing."""
        if not accepted:
            return Skipped()
        if selection.is_empty:
            return Skipped("Please select items to perform bulk action")
        if self.is_loading(key):
            return Skipped()
        return self.execute(key, selection)

    def execute(self, key: str, selection: SelectionState) -> Result:
        action = self.get(key)
        if action is None:
            return Skipped(f"Unknown action: {key}")

        keys = list(selection.selected_keys)
        rows = list(selection.selected_rows)

        if not self._loading.begin(key):
            return Skipped()
        try:
            value = self._handler(key, keys, rows)
        except Exception as e:
            logger.exception(
                "Bulk action failed",
                extra={"action": key, "n_items": len(keys)},
            )
            return Err(f"Failed to {action.label.lower()}", e)
        finally:
            self._loading.end(key)

        logger.info("Bulk action completed", extra={"action": key, "n_items": len(keys)})
        return Ok(f"{action.label} completed for {len(keys)} items", value)
