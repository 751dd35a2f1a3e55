from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

RowPredicate = Callable[[Mapping[str, Any]], bool]


def disabled_when(conditions: Optional[Mapping[str, Sequence[Any]]] = None) -> RowPredicate:
    """
    Predicate locking rows whose field holds one of the listed values, e.g.
    ``{"status": ["banned"]}``. Records carrying a truthy ``disabled`` flag
    are always locked.
    """
    conditions = {k: tuple(v) for k, v in (conditions or {}).items()}

    def is_disabled(record: Mapping[str, Any]) -> bool:
        if record.get("disabled"):
            return True
        return any(record.get(k) in values for k, values in conditions.items())

    return is_disabled


def checkbox_props(
        record: Mapping[str, Any],
        is_disabled: Optional[RowPredicate] = None,
) -> Dict[str, Any]:
    """
    Checkbox props for a row. Locked rows (e.g. already banned users) cannot
    be selected.
    """
    is_disabled = is_disabled or disabled_when()
    return {
        "disabled": bool(is_disabled(record)),
        "name": record.get("name"),
    }


@dataclass(frozen=True)
class SelectionState:
    """
    Selected row identifiers and the matching row objects for the rendered page.

    Both tuples are positionally aligned. Every change produces a new instance,
    the old one is never mutated.
    """

    selected_keys: Tuple[Any, ...] = ()
    selected_rows: Tuple[Mapping[str, Any], ...] = ()

    def __post_init__(self) -> None:
        if len(self.selected_keys) != len(self.selected_rows):
            raise ValueError(
                f"Selection out of alignment: {len(self.selected_keys)} keys, "
                f"{len(self.selected_rows)} rows"
            )

    @property
    def count(self) -> int:
        return len(self.selected_keys)

    @property
    def is_empty(self) -> bool:
        return not self.selected_keys

    def on_change(self, keys: Iterable[Any], rows: Iterable[Mapping[str, Any]]) -> SelectionState:
        return SelectionState(tuple(keys), tuple(rows))

    def clear(self) -> SelectionState:
        return SelectionState()

    @classmethod
    def from_indices(
            cls,
            records: Sequence[Mapping[str, Any]],
            indices: Optional[Iterable[int]],
            row_key: str = "id",
            is_disabled: Optional[RowPredicate] = None,
    ) -> SelectionState:
        """
        Build a selection from the row indices Dash reports in ``selected_rows``.
        Out-of-range indices and disabled rows are dropped.
        """
        keys: List[Any] = []
        rows: List[Mapping[str, Any]] = []
        for idx in indices or []:
            if not 0 <= idx < len(records):
                continue
            record = records[idx]
            if checkbox_props(record, is_disabled)["disabled"]:
                continue
            keys.append(record.get(row_key))
            rows.append(record)
        return cls(tuple(keys), tuple(rows))

    def indices_in(self, records: Sequence[Mapping[str, Any]], row_key: str = "id") -> List[int]:
        """Positions of the selected keys inside ``records`` (for echoing back to Dash)."""
        wanted = set(self.selected_keys)
        return [i for i, r in enumerate(records) if r.get(row_key) in wanted]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "selected_keys": list(self.selected_keys),
            "selected_rows": [dict(r) for r in self.selected_rows],
        }

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> SelectionState:
        if not data:
            return cls()
        return cls(
            tuple(data.get("selected_keys", [])),
            tuple(data.get("selected_rows", [])),
        )
