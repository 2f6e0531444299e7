"""Tests for logging service configuration."""

import logging

import pytest

from leasing.config import settings
from leasing.services.logging import QUIET_LOGGERS, resolve_level, setup_logging


class TestSetupLogging:
    """Test root logger configuration."""

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

    def test_creates_log_directory(self, tmp_path) -> None:
        log_file = tmp_path / "nested" / "server.log"

        setup_logging(str(log_file))

        assert log_file.parent.exists()

    def test_stdout_and_file_handlers(self, tmp_path) -> None:
        setup_logging(str(tmp_path / "server.log"))

        kinds = [type(handler) for handler in self.root_logger.handlers]
        assert kinds == [logging.StreamHandler, logging.FileHandler]

    def test_empty_log_file_means_stdout_only(self) -> None:
        setup_logging("")
        assert len(self.root_logger.handlers) == 1

    def test_level_from_settings(self, tmp_path, monkeypatch) -> None:
        monkeypatch.setattr(settings, "log_level", "WARNING")

        applied = setup_logging(str(tmp_path / "server.log"))

        assert applied == logging.WARNING
        assert self.root_logger.level == logging.WARNING
        for handler in self.root_logger.handlers:
            assert handler.level == logging.WARNING

    def test_level_argument_wins(self, tmp_path, monkeypatch) -> None:
        monkeypatch.setattr(settings, "log_level", "WARNING")
        setup_logging(str(tmp_path / "server.log"), level="DEBUG")
        assert self.root_logger.level == logging.DEBUG

    def test_log_file_from_settings(self, tmp_path, monkeypatch) -> None:
        log_file = tmp_path / "jobs" / "generate.log"
        monkeypatch.setattr(settings, "log_file", str(log_file))

        setup_logging(level="INFO")
        logging.getLogger("leasing.cli").info("Generating payments")

        assert "leasing.cli - INFO - Generating payments" in log_file.read_text()

    def test_writes_formatted_lines(self, tmp_path) -> None:
        log_file = tmp_path / "server.log"
        setup_logging(str(log_file), level="INFO")

        logging.getLogger("leasing.test").warning("Schedule skipped")

        contents = log_file.read_text()
        assert "leasing.test - WARNING - Schedule skipped" in contents
        assert contents.startswith("[")

    def test_repeated_setup_does_not_duplicate_handlers(self, tmp_path) -> None:
        dummy_handler = logging.StreamHandler()
        self.root_logger.addHandler(dummy_handler)

        setup_logging(str(tmp_path / "server.log"))
        setup_logging(str(tmp_path / "server.log"))

        assert len(self.root_logger.handlers) == 2
        assert dummy_handler not in self.root_logger.handlers

    @pytest.mark.parametrize("level, expected", [("DEBUG", logging.WARNING), ("ERROR", logging.ERROR)])
    def test_library_noise_reduced(self, tmp_path, level, expected) -> None:
        setup_logging(str(tmp_path / "server.log"), level=level)
        for name in QUIET_LOGGERS:
            assert logging.getLogger(name).level == expected


class TestResolveLevel:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("debug", logging.DEBUG),
            ("ERROR", logging.ERROR),
            ("warn", logging.WARNING),
            ("verbose", logging.INFO),
            ("", logging.INFO),
            (None, logging.INFO),
        ],
    )
    def test_names(self, value, expected):
        assert resolve_level(value) == expected
