from __future__ import annotations

import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Mapping, Optional

from yushan_admin.core.exceptions import PreferenceStoreError

_SAFE_KEY = re.compile(r"[^A-Za-z0-9_.-]")


class PreferenceStore(ABC):
    """
    Keyed string store for user preferences (column visibility, etc.).
    Values are opaque strings; callers choose the encoding.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass


class InMemoryPreferenceStore(PreferenceStore):
    """
    Dict backed store. The Dash layer seeds it from a browser-local dcc.Store
    and writes ``snapshot()`` back after the callback.
    """

    def __init__(self, initial: Optional[Mapping[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def snapshot(self) -> Dict[str, str]:
        return dict(self._data)


class LocalFilePreferenceStore(PreferenceStore):
    """
    One file per key below a root directory.
    """

    def __init__(self, root: Path):
        self.root = Path(root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)

    def _resolve(self, key: str) -> Path:
        if not key:
            raise PreferenceStoreError("Preference key must not be empty")
        # Prevent path traversal
        full_path = (self.root / f"{_SAFE_KEY.sub('_', key)}.json").resolve()
        if full_path.parent != self.root:
            raise PreferenceStoreError(f"Access denied: {key}")
        return full_path

    def get(self, key: str) -> Optional[str]:
        path = self._resolve(key)
        if not path.is_file():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise PreferenceStoreError(f"Failed to read preference {key!r}: {e}") from e

    def set(self, key: str, value: str) -> None:
        path = self._resolve(key)
        try:
            path.write_text(value, encoding="utf-8")
        except OSError as e:
            raise PreferenceStoreError(f"Failed to write preference {key!r}: {e}") from e
