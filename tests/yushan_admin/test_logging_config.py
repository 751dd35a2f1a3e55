from __future__ import annotations

import logging

from pythonjsonlogger import jsonlogger

from yushan_admin.logging_config import configure_logging


def _root_formatter():
    handlers = logging.getLogger().handlers
    assert len(handlers) == 1
    return handlers[0].formatter


def test_json_is_default(monkeypatch):
    monkeypatch.delenv("YUSHAN_ADMIN_LOG_FORMAT", raising=False)
    configure_logging()
    assert isinstance(_root_formatter(), jsonlogger.JsonFormatter)


def test_plain_from_env(monkeypatch):
    monkeypatch.setenv("YUSHAN_ADMIN_LOG_FORMAT", "plain")
    configure_logging(level=logging.DEBUG)
    assert not isinstance(_root_formatter(), jsonlogger.JsonFormatter)
    assert logging.getLogger().level == logging.DEBUG


def test_force_format_wins_over_env(monkeypatch):
    monkeypatch.setenv("YUSHAN_ADMIN_LOG_FORMAT", "plain")
    configure_logging(force_format="json")
    configure_logging(force_format="json")
    assert isinstance(_root_formatter(), jsonlogger.JsonFormatter)


def test_level_from_env(monkeypatch):
    monkeypatch.setenv("YUSHAN_ADMIN_LOG_LEVEL", "warning")
    configure_logging(force_format="plain")
    assert logging.getLogger().level == logging.WARNING
    assert logging.getLogger("werkzeug").level == logging.WARNING


def test_unknown_level_name_falls_back_to_info(monkeypatch):
    monkeypatch.setenv("YUSHAN_ADMIN_LOG_LEVEL", "chatty")
    configure_logging(force_format="plain")
    assert logging.getLogger().level == logging.INFO


def test_debug_level_opens_up_request_logs(monkeypatch):
    monkeypatch.delenv("YUSHAN_ADMIN_LOG_LEVEL", raising=False)
    configure_logging(level="DEBUG", force_format="plain")
    assert logging.getLogger("werkzeug").level == logging.DEBUG
