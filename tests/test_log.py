"""Tests for logging setup."""

import logging
from pathlib import Path

from kubetop.config import LoggingConfig
from kubetop.log import LOGGER_NAME, setup_logging


def file_handlers(logger: logging.Logger) -> list[logging.FileHandler]:
    return [h for h in logger.handlers if isinstance(h, logging.FileHandler)]


class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_disabled_discards_records(self, tmp_path: Path) -> None:
        """Test disabled logging installs only a NullHandler."""
        log_file = tmp_path / "kubetop.log"
        logger = setup_logging(LoggingConfig(enabled=False, file=str(log_file)))

        assert logger.name == LOGGER_NAME
        assert logger.propagate is False
        assert [type(h) for h in logger.handlers] == [logging.NullHandler]
        assert not log_file.exists()

    def test_enabled_writes_file(self, tmp_path: Path) -> None:
        """Test enabled logging writes to the configured file."""
        log_file = tmp_path / "logs" / "kubetop.log"
        logger = setup_logging(LoggingConfig(enabled=True, level="WARNING", file=str(log_file)))

        logging.getLogger("kubetop.collectors").warning("source slow")
        logging.getLogger("kubetop.collectors").info("hidden")
        for handler in logger.handlers:
            handler.flush()

        assert logger.level == logging.WARNING
        content = log_file.read_text()
        assert "source slow" in content
        assert "hidden" not in content
        setup_logging(LoggingConfig())

    def test_debug_forces_file_logging(self, tmp_path: Path) -> None:
        """Test --debug enables DEBUG logging even when logging is off."""
        log_file = tmp_path / "kubetop.log"
        logger = setup_logging(LoggingConfig(enabled=False, file=str(log_file)), debug=True)

        assert logger.level == logging.DEBUG
        assert len(file_handlers(logger)) == 1
        setup_logging(LoggingConfig())

    def test_repeated_setup_replaces_handlers(self, tmp_path: Path) -> None:
        """Test calling setup twice does not stack handlers."""
        config = LoggingConfig(enabled=True, file=str(tmp_path / "kubetop.log"))
        setup_logging(config)
        logger = setup_logging(config)

        assert len(logger.handlers) == 1
        setup_logging(LoggingConfig())
