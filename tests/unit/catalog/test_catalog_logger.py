"""Tests for catalog.logger.setup_logging()."""

import logging
from logging.handlers import RotatingFileHandler

import colorlog

from catalog.logger import setup_logging


class TestSetupLogging:
    def test_console_handler_with_colors(self, monkeypatch):
        monkeypatch.delenv("CATALOG_LOG_FILE", raising=False)
        monkeypatch.delenv("CATALOG_LOG_LEVEL", raising=False)

        logger = setup_logging()

        assert logger.name == "catalog"
        assert logger.level == logging.INFO
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, colorlog.ColoredFormatter)

    def test_repeated_calls_do_not_duplicate_handlers(self, monkeypatch):
        monkeypatch.delenv("CATALOG_LOG_FILE", raising=False)

        setup_logging()
        logger = setup_logging("debug")

        assert len(logger.handlers) == 1
        assert logger.level == logging.DEBUG

    def test_level_from_environment(self, monkeypatch):
        monkeypatch.setenv("CATALOG_LOG_LEVEL", "warning")
        monkeypatch.delenv("CATALOG_LOG_FILE", raising=False)

        assert setup_logging().level == logging.WARNING

    def test_rotating_file_handler(self, monkeypatch, tmp_path):
        """Test that CATALOG_LOG_FILE adds a size-rotated file handler."""
        log_file = tmp_path / "catalog.log"
        monkeypatch.setenv("CATALOG_LOG_FILE", str(log_file))
        monkeypatch.setenv("LOG_FILE_MAX_BYTES", "2048")
        monkeypatch.setenv("LOG_FILE_BACKUP_COUNT", "2")

        logger = setup_logging()
        file_handlers = [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]

        assert len(file_handlers) == 1
        assert file_handlers[0].maxBytes == 2048
        assert file_handlers[0].backupCount == 2

        logging.getLogger("catalog.session").info("Logged in as alice")
        file_handlers[0].flush()
        assert "Logged in as alice" in log_file.read_text()

    def test_httpx_quiet_unless_debugging(self, monkeypatch):
        monkeypatch.delenv("CATALOG_LOG_FILE", raising=False)

        setup_logging("INFO")
        assert logging.getLogger("httpx").level == logging.WARNING

        setup_logging("DEBUG")
        assert logging.getLogger("httpx").level == logging.DEBUG
