"""Unit tests for logging configuration module.

Tests verify that setup_logging applies the requested level and format,
and that the per-module levels are installed.
"""

import logging

import pytest

from diligence_labs.core.logging_config import (
    DETAILED_FORMAT,
    JSON_FORMAT,
    MODULE_LOG_LEVELS,
    SIMPLE_FORMAT,
    get_logger,
    setup_logging,
)


@pytest.fixture(autouse=True)
def _restore_root_handlers():
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


def _console_handler() -> logging.Handler:
    return next(h for h in logging.getLogger().handlers if type(h) is logging.StreamHandler)


class TestSetupLogging:
    @pytest.mark.parametrize(
        "log_level,expected_level",
        [
            ("DEBUG", logging.DEBUG),
            ("INFO", logging.INFO),
            ("WARNING", logging.WARNING),
            ("error", logging.ERROR),
        ],
    )
    def test_console_handler_level(self, log_level, expected_level):
        setup_logging(log_level=log_level, enable_file=False)

        assert _console_handler().level == expected_level
        assert logging.getLogger().level == logging.DEBUG

    @pytest.mark.parametrize(
        "log_format,expected",
        [("simple", SIMPLE_FORMAT), ("json", JSON_FORMAT), ("detailed", DETAILED_FORMAT), ("unknown", DETAILED_FORMAT)],
    )
    def test_format_selection(self, log_format, expected):
        setup_logging(log_level="INFO", log_format=log_format, enable_file=False)

        assert _console_handler().formatter._fmt == expected

    def test_module_levels_applied(self):
        setup_logging(log_level="INFO", enable_file=False)

        for module_name, module_level in MODULE_LOG_LEVELS.items():
            assert logging.getLogger(module_name).level == logging.getLevelName(module_level)

    def test_repeated_setup_does_not_duplicate_handlers(self):
        setup_logging(log_level="INFO", enable_file=False)
        setup_logging(log_level="INFO", enable_file=False)

        stream_handlers = [h for h in logging.getLogger().handlers if type(h) is logging.StreamHandler]
        assert len(stream_handlers) == 1


def test_get_logger_returns_named_logger():
    logger = get_logger("diligence_labs.server.api.v1.projects")

    assert logger.name == "diligence_labs.server.api.v1.projects"
    assert isinstance(logger, logging.Logger)


def test_file_handler_follows_settings(monkeypatch, tmp_path):
    from diligence_labs.server.core.config import settings

    monkeypatch.setattr(settings, "enable_file_logging", True)
    monkeypatch.setattr(settings, "log_file_dir", str(tmp_path / "logs"))

    setup_logging(log_level="INFO")

    file_handlers = [h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)]
    assert [h.baseFilename for h in file_handlers] == [str(tmp_path / "logs" / "diligence_labs.log")]
    for handler in file_handlers:
        handler.close()
