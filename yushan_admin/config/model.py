from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from yushan_admin.core.actions import ActionDescriptor
from yushan_admin.core.columns import ColumnDescriptor, validate_columns
from yushan_admin.core.exceptions import ConfigError
from yushan_admin.core.export import get_format
from yushan_admin.core.filters import COMMON_FILTERS, FilterField
from yushan_admin.core.table import TABLE_PRESETS, TableOptions, preset


@dataclass
class GlobalConfig:
    ui_title: str = "Yushan Admin"
    page_size: int = 10
    preference_dir: Optional[Path] = None
    default_table: Optional[str] = None
    tables: List[TableConfig] = field(default_factory=list)


@dataclass
class TableConfig:
    """
    Parsed config entry for a single admin table.
    """
    name: str
    title: str
    data_file: Path
    columns: Tuple[ColumnDescriptor, ...]
    row_key: str = "id"
    storage_key: Optional[str] = None
    preset: str = "default"
    export_formats: Tuple[str, ...] = ("csv", "excel", "json")
    export_filename: str = "export"
    filters: Tuple[FilterField, ...] = ()
    bulk_actions: Tuple[ActionDescriptor, ...] = ()
    disabled_when: Dict[str, Tuple[Any, ...]] = field(default_factory=dict)
    source_path: Optional[Path] = None

    def options(self, page_size: Optional[int] = None) -> TableOptions:
        overrides: Dict[str, Any] = {
            "title": self.title,
            "row_key": self.row_key,
            "storage_key": self.storage_key,
            "export_formats": self.export_formats,
            "export_filename": self.export_filename,
            "disabled_when": self.disabled_when,
        }
        base = TABLE_PRESETS[self.preset]
        if page_size and base.pagination is not False:
            overrides["pagination"] = {**dict(base.pagination), "page_size": page_size}
        if self.filters:
            overrides["enable_filters"] = True
        return preset(self.preset, **overrides)

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any], source_path: Path) -> TableConfig:
        """
        Raises:
            ConfigError: missing name / data_file / columns, unknown preset or
            export format, or invalid column, filter and action descriptors
        """
        for required in ("name", "data_file", "columns"):
            if required not in raw:
                raise ConfigError(f"{source_path.name}: missing '{required}'")

        preset_name = raw.get("preset", "default")
        if preset_name not in TABLE_PRESETS:
            raise ConfigError(f"{source_path.name}: unknown preset '{preset_name}'")

        formats = tuple(raw.get("export_formats", ("csv", "excel", "json")))
        try:
            for key in formats:
                get_format(key)
            columns = tuple(ColumnDescriptor.from_dict(c) for c in raw["columns"])
            validate_columns(columns)
            filters = tuple(_filter_from_raw(f) for f in raw.get("filters", []))
            disabled = {
                str(k): tuple(v) if isinstance(v, (list, tuple)) else (v,)
                for k, v in (raw.get("disabled_when") or {}).items()
            }
            bulk_actions = tuple(ActionDescriptor.from_dict(a) for a in raw.get("bulk_actions", []))
            _validate_actions(bulk_actions)
        except ConfigError:
            raise
        except Exception as e:
            raise ConfigError(f"{source_path.name}: {e}") from e

        data_file = Path(raw["data_file"])
        if not data_file.is_absolute():
            data_file = (source_path.parent.parent / data_file).resolve()

        return cls(
            name=raw["name"],
            title=raw.get("title", raw["name"]),
            data_file=data_file,
            columns=columns,
            row_key=raw.get("row_key", "id"),
            storage_key=raw.get("storage_key") or f"yushan_admin_{raw['name']}_columns",
            preset=preset_name,
            export_formats=formats,
            export_filename=raw.get("export_filename", raw["name"]),
            filters=filters,
            bulk_actions=bulk_actions,
            disabled_when=disabled,
            source_path=source_path,
        )


def _filter_from_raw(raw: Any) -> FilterField:
    # a bare string names one of the common filters
    if isinstance(raw, str):
        try:
            return COMMON_FILTERS[raw]
        except KeyError:
            raise ConfigError(f"Unknown common filter '{raw}'")
    return FilterField.from_dict(raw)


def _validate_actions(actions: Tuple[ActionDescriptor, ...]) -> None:
    keys = [a.key for a in actions]
    duplicates = sorted({k for k in keys if keys.count(k) > 1})
    if duplicates:
        raise ConfigError(f"Duplicate bulk action keys: {duplicates}")
