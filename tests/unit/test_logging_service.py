"""Tests for logging service configuration."""

import logging
import tempfile
from pathlib import Path
from unittest.mock import patch

from church_ledger.services.logging import get_log_level, setup_server_logging


class TestServerLogging:
    """Test server logging configuration."""

    def setup_method(self):
        """Save original handlers before each test."""
        self.root_logger = logging.getLogger()
        self.original_handlers = self.root_logger.handlers.copy()
        self.original_level = self.root_logger.level

    def teardown_method(self):
        """Restore original handlers after each test."""
        for handler in self.root_logger.handlers[:]:
            handler.close()
            self.root_logger.removeHandler(handler)
        for handler in self.original_handlers:
            self.root_logger.addHandler(handler)
        self.root_logger.setLevel(self.original_level)

    def test_creates_log_directory(self) -> None:
        """Test that the log file's directory is created."""
        with tempfile.TemporaryDirectory() as temp_dir:
            log_file = Path(temp_dir) / "test_logs" / "server.log"
            assert not log_file.parent.exists()

            setup_server_logging(str(log_file))

            assert log_file.parent.exists()

    def test_creates_stdout_and_file_handlers(self) -> None:
        """Test handlers installed when a log file is given."""
        with tempfile.TemporaryDirectory() as temp_dir:
            setup_server_logging(str(Path(temp_dir) / "server.log"))

            assert len(self.root_logger.handlers) == 2
            assert any(isinstance(h, logging.FileHandler) for h in self.root_logger.handlers)

    def test_level_from_environment(self) -> None:
        """LOG_LEVEL overrides the default level."""
        with tempfile.TemporaryDirectory() as temp_dir:
            with patch.dict("os.environ", {"LOG_LEVEL": "WARNING"}, clear=False):
                setup_server_logging(str(Path(temp_dir) / "server.log"))

                assert self.root_logger.level == logging.WARNING
                assert all(h.level == logging.WARNING for h in self.root_logger.handlers)

    def test_messages_written_to_file(self) -> None:
        """Test that log records reach the file."""
        with tempfile.TemporaryDirectory() as temp_dir:
            log_file = Path(temp_dir) / "server.log"
            with patch.dict("os.environ", {"LOG_LEVEL": "INFO"}, clear=False):
                setup_server_logging(str(log_file))

            logging.getLogger("church_ledger.test").info("Recorded collection ID=1")
            for handler in self.root_logger.handlers:
                handler.flush()

            content = log_file.read_text()
            assert "church_ledger.test - INFO - Recorded collection ID=1" in content

    def test_stdout_only_without_file(self) -> None:
        """Test that no file handler is added without a log file."""
        setup_server_logging(None)

        assert len(self.root_logger.handlers) == 1
        assert not isinstance(self.root_logger.handlers[0], logging.FileHandler)

    def test_quiets_sql_engine_logger(self) -> None:
        """Test that SQL engine logging stays at WARNING or above."""
        with patch.dict("os.environ", {"LOG_LEVEL": "DEBUG"}, clear=False):
            setup_server_logging(None)

        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING


class TestGetLogLevel:
    """Test log level resolution."""

    def test_default_when_unset(self, monkeypatch) -> None:
        """Test the default level when LOG_LEVEL is not set."""
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        assert get_log_level("ERROR") == logging.ERROR

    def test_unknown_level_defaults_to_info(self) -> None:
        """An unknown level name falls back to INFO."""
        with patch.dict("os.environ", {"LOG_LEVEL": "LOUD"}, clear=False):
            assert get_log_level() == logging.INFO

    def test_case_insensitive(self) -> None:
        """Level names are case-insensitive."""
        with patch.dict("os.environ", {"LOG_LEVEL": "debug"}, clear=False):
            assert get_log_level() == logging.DEBUG
