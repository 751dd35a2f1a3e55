from __future__ import annotations

import logging
import os
from typing import Optional, Union

from pythonjsonlogger import jsonlogger

PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
JSON_FIELDS = "%(asctime)s %(levelname)s %(name)s %(message)s"

# chatty per-request loggers, kept at WARNING unless debugging
NOISY_LOGGERS = ("werkzeug", "urllib3")


def _resolve_level(level: Union[int, str, None]) -> int:
    if level is None:
        level = os.getenv("YUSHAN_ADMIN_LOG_LEVEL", "INFO")
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    # getLevelName returns "Level X" for unknown names
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(
        level: Union[int, str, None] = None,
        force_format: Optional[str] = None,
) -> None:
    """
    Install one stream handler on the root logger.

    ``level`` falls back to YUSHAN_ADMIN_LOG_LEVEL (name such as "DEBUG"),
    then INFO. ``force_format`` ("json" or "plain") wins over
    YUSHAN_ADMIN_LOG_FORMAT; JSON is the default. Calling it again replaces
    the handler instead of stacking a second one.
    """
    format_mode = (force_format or os.getenv("YUSHAN_ADMIN_LOG_FORMAT", "json")).lower()
    resolved = _resolve_level(level)

    handler = logging.StreamHandler()
    if format_mode == "plain":
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT))
    else:
        handler.setFormatter(jsonlogger.JsonFormatter(JSON_FIELDS))

    root = logging.getLogger()
    root.setLevel(resolved)
    root.handlers.clear()
    root.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if resolved <= logging.DEBUG else logging.WARNING)
