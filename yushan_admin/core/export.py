from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from yushan_admin.core.exceptions import ExportError
from yushan_admin.core.results import Err, Ok, Result, Skipped

logger = logging.getLogger(__name__)

Record = Mapping[str, Any]
ExportSink = Callable[[str, Sequence[Record], str], Any]

SCOPE_ALL = "all"
SCOPE_SELECTED = "selected"


def _csv_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ", ".join(_csv_text(v) for v in value)
    # one record per line
    return " ".join(str(value).splitlines())


def _csv_field(value: Any) -> str:
    text = _csv_text(value)
    if "," in text or '"' in text:
        return '"' + text.replace('"', '""') + '"'
    return text


def to_csv(records: Sequence[Record]) -> str:
    """
    Delimited text. The header row is the keys of the first record in insertion
    order; every row emits one field per header key. Fields containing a comma
    or a double quote are quoted with inner quotes doubled. None renders empty,
    lists are joined with ", " and line breaks inside a value become spaces.
    """
    if not records:
        return ""
    headers = list(records[0].keys())
    lines = [",".join(headers)]
    for row in records:
        lines.append(",".join(_csv_field(row.get(h)) for h in headers))
    return "\n".join(lines)


def to_json(records: Sequence[Record]) -> str:
    return json.dumps([dict(r) for r in records], indent=2, ensure_ascii=False)


@dataclass(frozen=True)
class ExportFormat:
    key: str
    extension: str
    mime_type: str
    serializer: Callable[[Sequence[Record]], str] = field(compare=False)

    @property
    def label(self) -> str:
        return self.key.upper()


# "excel" is CSV text with an .xlsx extension, not a spreadsheet binary.
EXPORT_FORMATS: Dict[str, ExportFormat] = {
    "csv": ExportFormat("csv", "csv", "text/csv;charset=utf-8;", to_csv),
    "excel": ExportFormat(
        "excel",
        "xlsx",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        to_csv,
    ),
    "json": ExportFormat("json", "json", "application/json", to_json),
    "txt": ExportFormat("txt", "txt", "text/plain;charset=utf-8;", to_csv),
}

EXPORT_PRESETS: Dict[str, Dict[str, Any]] = {
    "basic": {"formats": ["csv"], "filename": "data"},
    "standard": {"formats": ["csv", "excel", "json"], "filename": "export"},
    "comprehensive": {"formats": ["csv", "excel", "json", "txt"], "filename": "comprehensive_export"},
}


def get_format(key: str) -> ExportFormat:
    try:
        return EXPORT_FORMATS[key]
    except KeyError:
        raise ExportError(f"Unsupported format: {key}")


def serialize(format_key: str, records: Sequence[Record]) -> str:
    fmt = get_format(format_key)
    try:
        return fmt.serializer(records)
    except (TypeError, ValueError, AttributeError) as e:
        raise ExportError(f"Could not serialize records as {fmt.label}: {e}") from e


def export_timestamp(now: Optional[datetime] = None) -> str:
    """UTC time as YYYY-MM-DDTHH-mm-ss."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.strftime("%Y-%m-%dT%H-%M-%S")


def build_filename(
        base: str,
        extension: str,
        *,
        selected: bool = False,
        now: Optional[datetime] = None,
) -> str:
    suffix = "_selected" if selected else ""
    return f"{base}{suffix}_{export_timestamp(now)}.{extension}"


@dataclass(frozen=True)
class ExportArtifact:
    """A file ready to hand to the browser (dcc.send_string)."""
    filename: str
    content: str
    mime_type: str


@dataclass(frozen=True)
class ExportMenuItem:
    key: str
    label: str
    count: int = 0
    disabled: bool = False
    divider: bool = False


DIVIDER = ExportMenuItem(key="divider", label="", divider=True)


class ExportEngine:
    """
    Serializes record lists and produces either a download artifact or a call
    to a caller-supplied sink.

    One format renders as a single button, several as a menu. ``loading`` is
    tracked per format and always cleared once an export finishes.
    """

    def __init__(
            self,
            *,
            filename: str = "export",
            formats: Sequence[str] = ("csv", "excel", "json"),
            sink: Optional[ExportSink] = None,
            clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        if not formats:
            raise ExportError("At least one export format is required")
        for key in formats:
            get_format(key)
        self.filename = filename or "export"
        self.formats: List[str] = list(formats)
        self._sink = sink
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._loading: Dict[str, bool] = {}

    @property
    def loading(self) -> Dict[str, bool]:
        return dict(self._loading)

    def is_loading(self, format_key: str) -> bool:
        return self._loading.get(format_key, False)

    # ------------------------------------------------------------------
    # Presentation
    # ------------------------------------------------------------------
    @property
    def single_format(self) -> bool:
        return len(self.formats) == 1

    def button_label(self) -> str:
        if self.single_format:
            return f"Export {get_format(self.formats[0]).label}"
        return "Export"

    def is_disabled(self, data: Sequence[Record], selected: Sequence[Record] = ()) -> bool:
        if self.single_format:
            return len(data) == 0
        return len(data) == 0 and len(selected) == 0

    def menu_items(self, data: Sequence[Record], selected: Sequence[Record] = ()) -> List[ExportMenuItem]:
        items = [
            ExportMenuItem(
                key=f"{SCOPE_ALL}_{key}",
                label=f"Export All as {get_format(key).label}",
                count=len(data),
                disabled=len(data) == 0,
            )
            for key in self.formats
        ]
        if selected:
            items.append(DIVIDER)
            items.extend(
                ExportMenuItem(
                    key=f"{SCOPE_SELECTED}_{key}",
                    label=f"Export Selected as {get_format(key).label}",
                    count=len(selected),
                )
                for key in self.formats
            )
        return items

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------
    def export_menu_choice(
            self,
            item_key: str,
            data: Sequence[Record],
            selected: Sequence[Record] = (),
    ) -> Result:
        scope, _, format_key = item_key.partition("_")
        records = selected if scope == SCOPE_SELECTED else data
        return self.export(format_key, records, scope=scope, has_selection=bool(selected))

    def export_single(self, data: Sequence[Record], selected: Sequence[Record] = ()) -> Result:
        """Single button mode exports the selection when there is one."""
        if selected:
            return self.export(self.formats[0], selected, scope=SCOPE_SELECTED, has_selection=True)
        return self.export(self.formats[0], data)

    def export(
            self,
            format_key: str,
            records: Sequence[Record],
            *,
            scope: str = SCOPE_ALL,
            has_selection: bool = False,
    ) -> Result:
        """
        Serialize ``records`` and deliver them.

        :return: Ok carrying an ExportArtifact (download) or None (sink),
            Skipped with a warning for an empty dataset,
            Err when serialization or the sink fails
        """
        if not records:
            return Skipped("No data to export")

        self._loading[format_key] = True
        try:
            fmt = get_format(format_key)
            content = serialize(format_key, records)
            if self._sink is not None:
                self._sink(format_key, records, content)
                artifact = None
            else:
                artifact = ExportArtifact(
                    filename=build_filename(
                        self.filename,
                        fmt.extension,
                        selected=scope == SCOPE_SELECTED and has_selection,
                        now=self._clock(),
                    ),
                    content=content,
                    mime_type=fmt.mime_type,
                )
            logger.info(
                "Export finished",
                extra={"format": format_key, "n_records": len(records), "scope": scope},
            )
            return Ok(f"Exported {len(records)} items as {fmt.label}", artifact)
        except Exception as e:
            logger.exception("Export failed", extra={"format": format_key})
            return Err(f"Export failed: {e}", e)
        finally:
            self._loading[format_key] = False
