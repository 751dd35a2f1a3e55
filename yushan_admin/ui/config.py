from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from yushan_admin.config.model import GlobalConfig, TableConfig
from yushan_admin.core.actions import ActionLoadingMap
from yushan_admin.services.preference_store import PreferenceStore
from yushan_admin.services.user_service import UserServiceManager


@dataclass
class AppConfig:
    config_root: Path
    global_config: GlobalConfig
    tables: Dict[str, TableConfig] = field(default_factory=dict)
    default_table: Optional[str] = None

    services: Optional[UserServiceManager] = None
    # server-side column preferences; None keeps them in the browser
    preference_store: Optional[PreferenceStore] = None
    # per-table bulk-action loading flags, outliving a single request
    action_loading: Dict[str, ActionLoadingMap] = field(default_factory=dict)

    def validate(self) -> None:
        """Ensure all required services are attached before the app starts."""
        if self.services is None:
            raise RuntimeError("AppConfig.services must be initialized.")
        if not self.tables:
            raise RuntimeError("AppConfig.tables must not be empty.")
        if self.default_table not in self.tables:
            raise RuntimeError(f"Unknown default table '{self.default_table}'.")

    def table(self, name: Optional[str]) -> TableConfig:
        return self.tables.get(name or "") or self.tables[self.default_table]

    def loading_for(self, name: str) -> ActionLoadingMap:
        return self.action_loading.setdefault(name, ActionLoadingMap())
