"""
Unit tests for logging setup.

Tests:
- File handlers write app.log and workflow.log
- Repeated setup registers the exit hook once
"""

import logging
from unittest.mock import MagicMock

import pytest

import core.logging_config as logging_config
from core.logging_config import LogConfig, setup_logging, stop_queue_listener


@pytest.fixture
def restore_root_logger():
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield
    stop_queue_listener()
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_log_files_created(self, tmp_path, monkeypatch, restore_root_logger):
        monkeypatch.setattr(logging_config.atexit, "register", MagicMock())

        setup_logging(LogConfig(log_dir=str(tmp_path), enable_console=False))

        assert (tmp_path / "app.log").exists()
        assert (tmp_path / "workflow.log").exists()

    def test_exit_hook_registered_once(self, tmp_path, monkeypatch, restore_root_logger):
        register = MagicMock()
        monkeypatch.setattr(logging_config.atexit, "register", register)
        monkeypatch.setattr(logging_config, "_atexit_registered", False)
        config = LogConfig(log_dir=str(tmp_path), enable_console=False)

        setup_logging(config)
        setup_logging(config)
        setup_logging(config)

        register.assert_called_once_with(stop_queue_listener)
