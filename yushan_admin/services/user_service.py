from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence

import pandas as pd

from yushan_admin.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

# status written by each bulk action; "delete" removes the rows instead
ACTION_STATUS: Dict[str, str] = {
    "approve": "active",
    "reject": "rejected",
    "ban_users": "banned",
}


def _to_records(frame: pd.DataFrame) -> List[Dict[str, Any]]:
    # NaN -> None so records serialize cleanly to JSON and CSV
    cleaned = frame.astype(object).where(pd.notna(frame), None)
    return cleaned.to_dict(orient="records")


class UserService:
    """
    In-process data source for one admin table, backed by a pandas DataFrame.

    Responses follow the ``{success, data, total}`` shape the tables consume.
    ``bulk_update`` is wired in as the table's bulk-action handler.
    """

    def __init__(self, frame: pd.DataFrame, row_key: str = "id"):
        if row_key not in frame.columns:
            raise ConfigError(f"Row key '{row_key}' is not a column of the data")
        if frame[row_key].duplicated().any():
            raise ConfigError(f"Row key '{row_key}' has duplicate values")
        self.row_key = row_key
        self._frame = frame.reset_index(drop=True)
        # bulk updates for different actions may arrive on concurrent requests
        self._lock = threading.Lock()

    @classmethod
    def from_csv(cls, path: Path, row_key: str = "id") -> UserService:
        path = Path(path)
        if not path.is_file():
            raise ConfigError(f"Data file not found at {path}")
        logger.info("Loading table data", extra={"path": str(path)})
        frame = pd.read_csv(path)
        for col in frame.columns:
            if frame[col].dtype == object:
                lowered = frame[col].dropna().astype(str).str.lower()
                if not lowered.empty and lowered.isin(["true", "false"]).all():
                    frame[col] = frame[col].map(
                        lambda v: None if pd.isna(v) else str(v).lower() == "true"
                    )
        return cls(frame, row_key=row_key)

    @property
    def frame(self) -> pd.DataFrame:
        with self._lock:
            return self._frame.copy()

    def __len__(self) -> int:
        return len(self._frame)

    def records(self) -> List[Dict[str, Any]]:
        with self._lock:
            return _to_records(self._frame)

    def get_users(
            self,
            *,
            page: int = 1,
            limit: Optional[int] = None,
            search: str = "",
            status: Optional[str] = None,
            user_type: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Page through the records.

        :param page: 1-based page number
        :param limit: page size, None for everything
        :param search: case-insensitive substring on ``username`` / ``email``
        """
        with self._lock:
            frame = self._frame.copy()
        if search:
            needle = search.lower()
            mask = pd.Series(False, index=frame.index)
            for col in ("username", "email"):
                if col in frame.columns:
                    mask |= frame[col].astype(str).str.lower().str.contains(needle, regex=False)
            frame = frame[mask]
        if status and status != "all" and "status" in frame.columns:
            frame = frame[frame["status"] == status]
        if user_type and user_type != "all" and "user_type" in frame.columns:
            frame = frame[frame["user_type"] == user_type]

        total = len(frame)
        if limit:
            start = (max(page, 1) - 1) * limit
            frame = frame.iloc[start:start + limit]

        return {"success": True, "data": _to_records(frame), "total": total, "page": page, "limit": limit}

    def bulk_update(
            self,
            action: str,
            keys: Sequence[Any],
            rows: Optional[Sequence[Mapping[str, Any]]] = None,
    ) -> Dict[str, Any]:
        """
        Apply a catalog action to the given row keys.

        Raises:
            KeyError: none of ``keys`` exist
            ValueError: ``action`` is not supported
        """
        with self._lock:
            return self._apply(action, keys)

    def _apply(self, action: str, keys: Sequence[Any]) -> Dict[str, Any]:
        mask = self._frame[self.row_key].isin(list(keys))
        if not mask.any():
            raise KeyError(f"No rows match keys {list(keys)}")

        n = int(mask.sum())
        if action == "delete":
            self._frame = self._frame[~mask].reset_index(drop=True)
        elif action in ACTION_STATUS:
            self._frame.loc[mask, "status"] = ACTION_STATUS[action]
        elif action == "flag":
            if "flagged" not in self._frame.columns:
                self._frame["flagged"] = False
            self._frame["flagged"] = self._frame["flagged"].astype(object)
            self._frame.loc[mask, "flagged"] = True
        elif action == "export":
            pass
        else:
            raise ValueError(f"Unsupported bulk action: {action}")

        logger.info(
            "Bulk update applied",
            extra={"action": action, "n_items": n},
        )
        return {"success": True, "updated": n}


class UserServiceManager(Mapping[str, UserService]):
    """
    Table name -> UserService, loading each CSV on first access.
    """

    def __init__(self, sources: Mapping[str, Path], row_keys: Optional[Mapping[str, str]] = None):
        self._sources = dict(sources)
        self._row_keys = dict(row_keys or {})
        self._loaded: Dict[str, UserService] = {}

    def __getitem__(self, name: str) -> UserService:
        if name in self._loaded:
            return self._loaded[name]
        path = self._sources.get(name)
        if path is None:
            raise KeyError(f"Unknown table '{name}'")
        service = UserService.from_csv(path, row_key=self._row_keys.get(name, "id"))
        self._loaded[name] = service
        return service

    def __iter__(self) -> Iterator[str]:
        return iter(self._sources)

    def __len__(self) -> int:
        return len(self._sources)

    def is_loaded(self, name: str) -> bool:
        return name in self._loaded
