from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from yushan_admin.core.exceptions import ColumnConfigError

if TYPE_CHECKING:
    from yushan_admin.services.preference_store import PreferenceStore

logger = logging.getLogger(__name__)

ColumnChangeCallback = Callable[[List[str]], None]


@dataclass(frozen=True)
class ColumnDescriptor:
    """
    Declarative description of one table column.

    Fields:

    - key: explicit identifier, wins over data_index when both are set
    - data_index: record field rendered in the column
    - title: display label
    - required: column can never be hidden
    - default_visible: shown after a reset to defaults
    - extra: passthrough options for the render target (type, format, ...)
    """

    title: str
    key: Optional[str] = None
    data_index: Optional[str] = None
    required: bool = False
    default_visible: bool = True
    extra: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @property
    def identity(self) -> Optional[str]:
        return self.key or self.data_index

    @property
    def data_field(self) -> Optional[str]:
        """Record field the column reads."""
        return self.data_index or self.key

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ColumnDescriptor:
        known = {"title", "key", "data_index", "dataIndex", "required", "default_visible", "defaultVisible"}
        return cls(
            title=str(data.get("title", "")),
            key=data.get("key"),
            data_index=data.get("data_index", data.get("dataIndex")),
            required=bool(data.get("required", False)),
            default_visible=data.get("default_visible", data.get("defaultVisible", True)) is not False,
            extra={k: v for k, v in data.items() if k not in known},
        )


def column_identity(column: ColumnDescriptor) -> Optional[str]:
    return column.identity


def validate_columns(columns: Sequence[ColumnDescriptor]) -> None:
    """
    Raises:
        ColumnConfigError: a descriptor has neither key nor data_index, or two
        descriptors share an identity
    """
    seen: set[str] = set()
    for idx, col in enumerate(columns):
        ident = col.identity
        if not ident:
            raise ColumnConfigError(
                f"Column #{idx} ({col.title or 'untitled'}) needs a key or data_index"
            )
        if ident in seen:
            raise ColumnConfigError(f"Duplicate column identity '{ident}'")
        seen.add(ident)


def default_visible_columns(columns: Iterable[ColumnDescriptor]) -> List[str]:
    return [c.identity for c in columns if c.default_visible is not False]


class ColumnVisibilityManager:
    """
    Tracks which columns of a table are shown.

    The toggle list (``visible_columns``) is what gets persisted. Required
    columns are unioned back in by ``get_visible_columns`` and can't be toggled
    off, but they are never forced into the toggle list itself.

    Construction is the "mount": if ``store`` already holds a list under
    ``storage_key`` it replaces the initial list and ``on_change`` fires
    straight away so the host stays in sync.
    """

    def __init__(
            self,
            columns: Sequence[ColumnDescriptor],
            *,
            initial_visible: Optional[Sequence[str]] = None,
            store: Optional[PreferenceStore] = None,
            storage_key: Optional[str] = None,
            on_change: Optional[ColumnChangeCallback] = None,
    ) -> None:
        validate_columns(columns)
        self._columns: Tuple[ColumnDescriptor, ...] = tuple(columns)
        self._store = store
        self._storage_key = storage_key
        self._on_change = on_change
        self.search_term = ""

        if initial_visible is not None:
            self._visible: Tuple[str, ...] = tuple(initial_visible)
        else:
            self._visible = tuple(self.default_visible())

        self._restore()

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------
    @property
    def columns(self) -> Tuple[ColumnDescriptor, ...]:
        return self._columns

    @property
    def visible_columns(self) -> List[str]:
        return list(self._visible)

    def default_visible(self) -> List[str]:
        return default_visible_columns(self._columns)

    def get_visible_columns(self) -> List[ColumnDescriptor]:
        """Descriptors to render: in the toggle list, or required."""
        visible = set(self._visible)
        return [c for c in self._columns if c.identity in visible or c.required]

    def is_visible(self, identity: str) -> bool:
        return identity in self._visible

    def filtered_columns(self) -> List[ColumnDescriptor]:
        """Columns whose title matches the search term (case-insensitive substring)."""
        term = self.search_term.lower()
        return [c for c in self._columns if term in (c.title or "").lower()]

    @property
    def all_visible(self) -> bool:
        visible = set(self._visible)
        return all(c.identity in visible for c in self.filtered_columns())

    @property
    def some_visible(self) -> bool:
        visible = set(self._visible)
        return any(c.identity in visible for c in self.filtered_columns())

    @property
    def indeterminate(self) -> bool:
        return self.some_visible and not self.all_visible

    @property
    def master_label(self) -> str:
        return "Hide All" if self.all_visible else "Show All"

    def summary(self) -> str:
        return f"{len(self._visible)} / {len(self._columns)} columns visible"

    # ------------------------------------------------------------------
    # Write side
    # ------------------------------------------------------------------
    def handle_column_change(self, new_visible: Sequence[str]) -> None:
        """Host-level setter. Replaces the list without persisting."""
        self._visible = tuple(new_visible)

    def toggle(self, identity: str, checked: bool) -> List[str]:
        col = self._by_identity(identity)
        if checked:
            if identity in self._visible:
                return self.visible_columns
            new_visible = self._visible + (identity,)
        else:
            if col is not None and col.required:
                logger.debug("Ignoring hide request for required column %s", identity)
                return self.visible_columns
            new_visible = tuple(k for k in self._visible if k != identity)
        return self._commit(new_visible)

    def set_all(self, checked: bool) -> List[str]:
        if checked:
            new_visible = tuple(c.identity for c in self.filtered_columns())
        else:
            new_visible = ()
        return self._commit(new_visible)

    def search(self, term: Optional[str]) -> List[ColumnDescriptor]:
        self.search_term = term or ""
        return self.filtered_columns()

    def reset(self) -> List[str]:
        self.search_term = ""
        return self._commit(tuple(self.default_visible()))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _by_identity(self, identity: str) -> Optional[ColumnDescriptor]:
        return next((c for c in self._columns if c.identity == identity), None)

    def _commit(self, new_visible: Tuple[str, ...]) -> List[str]:
        self._visible = new_visible
        self._persist()
        result = self.visible_columns
        if self._on_change is not None:
            self._on_change(result)
        return result

    def _persist(self) -> None:
        if self._store is None or not self._storage_key:
            return
        try:
            self._store.set(self._storage_key, json.dumps(list(self._visible)))
        except Exception:
            logger.exception(
                "Failed to save column preferences",
                extra={"storage_key": self._storage_key},
            )

    def _restore(self) -> None:
        if self._store is None or not self._storage_key:
            return
        try:
            raw = self._store.get(self._storage_key)
            if not raw:
                return
            saved = json.loads(raw)
            if not isinstance(saved, list) or not all(isinstance(k, str) for k in saved):
                raise ValueError(f"expected a JSON list of strings, got {type(saved).__name__}")
        except Exception:
            logger.exception(
                "Failed to load column preferences",
                extra={"storage_key": self._storage_key},
            )
            return

        known = {c.identity for c in self._columns}
        self._visible = tuple(k for k in saved if k in known)
        if self._on_change is not None:
            self._on_change(self.visible_columns)
