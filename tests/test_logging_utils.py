"""
Tests for logging configuration.
"""

import logging

import structlog

from conplug.core.settings import Settings
from conplug.core.utils.logging import configure_logging, get_logger


def test_configure_logging_level_from_env(monkeypatch):
    monkeypatch.setenv("CONPLUG_LOG_LEVEL", "debug")
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    for handler in saved_handlers:
        root.removeHandler(handler)
    try:
        configure_logging()
        assert root.level == logging.DEBUG
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
        for handler in saved_handlers:
            root.addHandler(handler)
        root.setLevel(saved_level)
        structlog.reset_defaults()


def test_configure_logging_json_renderer(monkeypatch):
    monkeypatch.setenv("CONPLUG_LOG_JSON", "1")
    try:
        configure_logging()
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
    finally:
        structlog.reset_defaults()


def test_configure_logging_console_renderer(monkeypatch):
    monkeypatch.setenv("CONPLUG_LOG_JSON", "0")
    try:
        configure_logging()
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)
    finally:
        structlog.reset_defaults()


def test_get_logger_binds_context():
    logger = get_logger("conplug.test")
    bound = logger.bind(root="/ws")
    assert bound is not None


def test_configure_logging_from_explicit_settings():
    try:
        configure_logging(Settings(LOG_JSON=True, LOG_LEVEL="error"))
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
    finally:
        structlog.reset_defaults()


def test_log_settings_defaults(monkeypatch):
    monkeypatch.delenv("CONPLUG_LOG_JSON", raising=False)
    monkeypatch.delenv("CONPLUG_LOG_LEVEL", raising=False)
    s = Settings()
    assert s.LOG_LEVEL == "WARNING"
    assert s.LOG_JSON is True
