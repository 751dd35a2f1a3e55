from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import pandas as pd

from yushan_admin.core.exceptions import FilterConfigError

logger = logging.getLogger(__name__)

FilterValues = Dict[str, Any]
FiltersChangeCallback = Callable[[FilterValues], None]


class FilterType(str, Enum):
    TEXT = "text"
    SEARCH = "search"
    SELECT = "select"
    MULTISELECT = "multiselect"
    DATE = "date"
    DATERANGE = "daterange"
    NUMBER = "number"
    NUMBERRANGE = "numberrange"
    SWITCH = "switch"
    CHECKBOX = "checkbox"


# Bootstrap 12-column grid widths
QUICK_SPAN = 3
ADVANCED_SPAN = 4


@dataclass(frozen=True)
class FilterOption:
    label: str
    value: Any


@dataclass(frozen=True)
class FilterField:
    """
    One filter control.

    - span: column width (int) or responsive widths ({"xs": 12, "md": 6})
    - quick_filter: render inline above the table instead of in the advanced panel
    - multiple: a "select" that accepts several values
    """

    key: str
    label: str
    type: FilterType = FilterType.TEXT
    options: Tuple[FilterOption, ...] = ()
    quick_filter: bool = False
    span: Union[int, Mapping[str, int], None] = None
    placeholder: Optional[str] = None
    multiple: bool = False

    @property
    def col_props(self) -> Dict[str, int]:
        if isinstance(self.span, Mapping):
            return dict(self.span)
        return {"width": self.span or (QUICK_SPAN if self.quick_filter else ADVANCED_SPAN)}

    def option_label(self, value: Any) -> Any:
        opt = next((o for o in self.options if o.value == value), None)
        return opt.label if opt is not None else value

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FilterField:
        raw_type = data.get("type", "text")
        try:
            ftype = FilterType(raw_type)
        except ValueError:
            raise FilterConfigError(f"Filter '{data.get('key')}' has unknown type '{raw_type}'")
        return cls(
            key=data["key"],
            label=data.get("label", data["key"]),
            type=ftype,
            options=tuple(FilterOption(o["label"], o["value"]) for o in data.get("options", [])),
            quick_filter=bool(data.get("quick_filter", data.get("quickFilter", False))),
            span=data.get("span"),
            placeholder=data.get("placeholder"),
            multiple=bool(data.get("multiple", False)),
        )


COMMON_FILTERS: Dict[str, FilterField] = {
    "search": FilterField("search", "Search", FilterType.SEARCH, quick_filter=True, span=4,
                          placeholder="Search..."),
    "status": FilterField(
        "status",
        "Status",
        FilterType.SELECT,
        options=(
            FilterOption("Active", "active"),
            FilterOption("Inactive", "inactive"),
            FilterOption("Pending", "pending"),
        ),
        quick_filter=True,
        span=2,
    ),
    "date_range": FilterField("date_range", "Date Range", FilterType.DATERANGE, quick_filter=True, span=3),
    "category": FilterField("category", "Category", FilterType.SELECT, span=3),
    "tags": FilterField("tags", "Tags", FilterType.MULTISELECT, span=4),
    "verified": FilterField("verified", "Verified Only", FilterType.SWITCH, span=2),
}


def is_active_value(value: Any) -> bool:
    """Inactive: None, empty string, empty list, or a range dict with no bounds."""
    if value is None or value == "":
        return False
    if isinstance(value, (list, tuple)):
        return len(value) > 0
    if isinstance(value, Mapping):
        return any(v is not None and v != "" for v in value.values())
    return True


OPEN_END = "..."


def _short_date(value: Any) -> str:
    if value is None or value == "":
        return OPEN_END
    return pd.Timestamp(value).strftime("%b %d")


def _long_date(value: Any) -> str:
    return pd.Timestamp(value).strftime("%b %d, %Y")


def range_bounds(value: Any) -> Tuple[Any, Any]:
    if isinstance(value, Mapping):
        lo = value.get("start", value.get("min"))
        hi = value.get("end", value.get("max"))
        return lo, hi
    seq = list(value)
    return (seq[0] if seq else None), (seq[1] if len(seq) > 1 else None)


@dataclass(frozen=True)
class ActiveFilter:
    key: str
    label: str
    value: Any
    display: str

    @property
    def text(self) -> str:
        return f"{self.label}: {self.display}"


class FilterComposer:
    """
    Merges quick and advanced filter fields into one value map.

    Every change recomputes the whole map and hands it to ``on_change``.
    The advanced panel starts collapsed and its expand state is independent
    of the values.
    """

    def __init__(
            self,
            fields: Sequence[FilterField],
            *,
            initial_values: Optional[Mapping[str, Any]] = None,
            on_change: Optional[FiltersChangeCallback] = None,
    ) -> None:
        keys = [f.key for f in fields]
        if len(keys) != len(set(keys)):
            raise FilterConfigError(f"Duplicate filter keys: {keys}")
        self._fields: Tuple[FilterField, ...] = tuple(fields)
        self._on_change = on_change
        self._values: FilterValues = dict(initial_values or {})
        self.advanced_expanded = False

    @property
    def fields(self) -> Tuple[FilterField, ...]:
        return self._fields

    @property
    def quick_fields(self) -> List[FilterField]:
        return [f for f in self._fields if f.quick_filter]

    @property
    def advanced_fields(self) -> List[FilterField]:
        return [f for f in self._fields if not f.quick_filter]

    @property
    def values(self) -> FilterValues:
        return dict(self._values)

    def get_field(self, key: str) -> Optional[FilterField]:
        return next((f for f in self._fields if f.key == key), None)

    def toggle_advanced(self) -> bool:
        self.advanced_expanded = not self.advanced_expanded
        return self.advanced_expanded

    # ------------------------------------------------------------------
    # Changes
    # ------------------------------------------------------------------
    def set_value(self, key: str, value: Any) -> FilterValues:
        return self.set_values({key: value})

    def set_values(self, changed: Mapping[str, Any]) -> FilterValues:
        new_values = dict(self._values)
        for key, value in changed.items():
            fld = self.get_field(key)
            if fld is None:
                logger.warning("Ignoring value for unknown filter %r", key)
                continue
            # A switch turned off is "no filter", not "filter on False"
            if fld.type is FilterType.SWITCH and value is False:
                value = None
            new_values[key] = value
        return self._emit(new_values)

    def remove(self, key: str) -> FilterValues:
        new_values = {k: v for k, v in self._values.items() if k != key}
        return self._emit(new_values)

    def reset(self) -> FilterValues:
        return self._emit({})

    def _emit(self, new_values: FilterValues) -> FilterValues:
        self._values = new_values
        if self._on_change is not None:
            self._on_change(dict(new_values))
        return dict(new_values)

    # ------------------------------------------------------------------
    # Summary
    # ------------------------------------------------------------------
    @property
    def active_count(self) -> int:
        return sum(1 for v in self._values.values() if is_active_value(v))

    def format_display(self, fld: FilterField, value: Any) -> str:
        if fld.type is FilterType.DATERANGE:
            start, end = range_bounds(value)
            return f"{_short_date(start)} - {_short_date(end)}"
        if fld.type is FilterType.DATE:
            return _long_date(value)
        if fld.type is FilterType.NUMBERRANGE:
            lo, hi = range_bounds(value)
            return f"{'' if lo is None else lo} - {'' if hi is None else hi}".strip()
        if isinstance(value, (list, tuple)):
            return ", ".join(str(fld.option_label(v)) for v in value)
        if fld.type is FilterType.SWITCH:
            return "Yes"
        return str(fld.option_label(value))

    def active_filters(self) -> List[ActiveFilter]:
        tags: List[ActiveFilter] = []
        for key, value in self._values.items():
            if not is_active_value(value):
                continue
            fld = self.get_field(key)
            if fld is None:
                continue
            try:
                display = self.format_display(fld, value)
            except (TypeError, ValueError):
                logger.warning("Could not format value %r for filter %s", value, key)
                display = str(value)
            tags.append(ActiveFilter(key, fld.label, value, display))
        return tags

    # ------------------------------------------------------------------
    # Filtering
    # ------------------------------------------------------------------
    def apply(self, records: Sequence[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
        """Filter ``records`` with the current values. Order is preserved."""
        return apply_filters(records, self._values, self._fields)


_EXACT_TYPES = (FilterType.SELECT, FilterType.NUMBER, FilterType.SWITCH)


def _matches(item_value: Any, value: Any, fld: Optional[FilterField]) -> bool:
    if isinstance(value, (list, tuple)):
        if fld is not None and fld.type is FilterType.DATERANGE:
            return _in_date_range(item_value, *range_bounds(value))
        if isinstance(item_value, (list, tuple)):
            return any(v in value for v in item_value)
        return item_value in value
    if isinstance(value, Mapping):
        if "start" in value or "end" in value:
            return _in_date_range(item_value, value.get("start"), value.get("end"))
        lo, hi = value.get("min"), value.get("max")
        if item_value is None:
            return False
        if lo is not None and item_value < lo:
            return False
        if hi is not None and item_value > hi:
            return False
        return True
    if fld is not None and fld.type is FilterType.DATE:
        return _in_date_range(item_value, value, value)
    if fld is not None and fld.type in _EXACT_TYPES:
        return item_value == value
    if isinstance(value, str):
        return value.lower() in str(item_value if item_value is not None else "").lower()
    return item_value == value


def _in_date_range(item_value: Any, start: Any, end: Any) -> bool:
    if item_value in (None, ""):
        return False
    ts = pd.Timestamp(item_value).normalize()
    if start not in (None, "") and ts < pd.Timestamp(start).normalize():
        return False
    if end not in (None, "") and ts > pd.Timestamp(end).normalize():
        return False
    return True


def apply_filters(
        records: Sequence[Mapping[str, Any]],
        values: Mapping[str, Any],
        fields: Sequence[FilterField] = (),
) -> List[Mapping[str, Any]]:
    """
    Deterministic client-side filtering.

    - list values: membership (any overlap when the record value is a list)
    - {"min", "max"}: inclusive numeric range
    - {"start", "end"} or a daterange pair: inclusive date range
    - strings: case-insensitive substring
    - anything else: equality

    A "search" field matches against every field of the record.
    """
    by_key = {f.key: f for f in fields}
    result = list(records)
    for key, value in values.items():
        if not is_active_value(value):
            continue
        fld = by_key.get(key)
        if fld is not None and fld.type is FilterType.SEARCH:
            needle = str(value).lower()
            result = [
                r for r in result
                if any(needle in str(v).lower() for v in r.values() if v is not None)
            ]
            continue
        result = [r for r in result if _matches(r.get(key), value, fld)]
    return result
