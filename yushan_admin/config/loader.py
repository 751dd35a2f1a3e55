from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, List

from yushan_admin.config.model import GlobalConfig, TableConfig
from yushan_admin.core.exceptions import ConfigError

logger = logging.getLogger(__name__)


def load_table_configs(root: Path) -> List[TableConfig]:
    """
    Parse every ``root/tables/*.json`` into a TableConfig.

    Files that fail to parse are skipped and logged; duplicate table names
    keep the first file in sorted order.
    """
    tables_dir = Path(root) / "tables"
    tables: List[TableConfig] = []
    seen: Dict[str, Path] = {}
    failed = 0

    if not tables_dir.is_dir():
        return tables

    for config_file in sorted(tables_dir.glob("*.json")):
        try:
            with config_file.open(encoding="utf-8") as f:
                raw = json.load(f)
            cfg = TableConfig.from_raw(raw, source_path=config_file)
        except (ConfigError, ValueError) as e:
            failed += 1
            logger.error(
                "Skipping table due to config error",
                extra={"path": str(config_file), "error": str(e)},
            )
            continue

        if cfg.name in seen:
            failed += 1
            logger.error(
                "Skipping table with duplicate name",
                extra={"table": cfg.name, "path": str(config_file), "first": str(seen[cfg.name])},
            )
            continue

        seen[cfg.name] = config_file
        tables.append(cfg)

    logger.info(
        "Table configs loaded",
        extra={
            "config_root": str(root),
            "n_tables": len(tables),
            "n_failed": failed,
            "table_names": [t.name for t in tables],
        },
    )
    return tables


def load_global_config(root: Path) -> GlobalConfig:
    """
    Load configuration from a directory using the multi-file layout.

    Expected structure:

        root/
            global.json
            tables/
                users.json
                ...
            data/
                users.csv

    :param root: directory containing 'global.json' and 'tables/'
    :return: a GlobalConfig with its tables attached
    :raises ConfigError: global.json is missing or invalid, no table could be
        loaded, or default_table names an unknown table
    """
    root = Path(root)
    logger.info("Loading global config", extra={"config_root": str(root)})

    global_path = root / "global.json"
    if not global_path.is_file():
        raise ConfigError(f"File not found at {global_path}")

    try:
        with global_path.open(encoding="utf-8") as f:
            raw_global = json.load(f)
    except ValueError as e:
        raise ConfigError(f"Invalid JSON in {global_path}: {e}") from e

    tables = load_table_configs(root)
    if not tables:
        raise ConfigError(f"No valid tables could be loaded from config root: {root}")

    # Relative paths resolve against the config root
    preference_dir = None
    pref_raw = raw_global.get("preference_dir")
    if pref_raw:
        pref_path = Path(pref_raw)
        preference_dir = pref_path if pref_path.is_absolute() else (root / pref_path).resolve()

    default_table = raw_global.get("default_table") or tables[0].name
    if default_table not in {t.name for t in tables}:
        raise ConfigError(f"default_table '{default_table}' is not a loaded table")

    page_size = raw_global.get("page_size", 10)
    if not isinstance(page_size, int) or page_size <= 0:
        raise ConfigError(f"page_size must be a positive integer, got {page_size!r}")

    return GlobalConfig(
        ui_title=raw_global.get("ui_title", "Yushan Admin"),
        page_size=page_size,
        preference_dir=preference_dir,
        default_table=default_table,
        tables=tables,
    )
