"""
Unit tests for the logger module.
"""
import os
import logging
from logging.handlers import RotatingFileHandler

from vc_dossier.utils import logger as logger_module
from vc_dossier.utils.logger import setup_logger, get_logger, configure_loggers, pipeline_logger


def test_setup_logger():
    """Test that setup_logger creates a logger with the expected configuration."""
    logger = setup_logger("test_logger", level="INFO")

    assert logger.name == "test_logger"
    assert logger.level == logging.INFO
    assert logger.propagate is False

    has_console_handler = any(
        isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler)
        for handler in logger.handlers
    )
    assert has_console_handler, "Logger should have a console handler"

    logger.info("Test message from test_setup_logger")


def test_setup_logger_does_not_duplicate_handlers():
    """Calling setup_logger twice keeps a single console handler."""
    setup_logger("test_dupes", level="DEBUG")
    logger = setup_logger("test_dupes", level="DEBUG")

    assert len(logger.handlers) == 1
    assert logger.level == logging.DEBUG


def test_get_logger():
    """Test that get_logger returns service loggers and creates new ones."""
    assert get_logger("pipeline") is pipeline_logger

    logger = get_logger("test_component", level=logging.WARNING)
    assert logger.name == "test_component"
    assert logger.level == logging.WARNING


def test_configure_loggers(tmp_path, monkeypatch):
    """Test that configure_loggers attaches one file handler per service, once."""
    monkeypatch.setattr(logger_module, "_loggers_configured", False)
    logs_dir = str(tmp_path / "logs")

    try:
        configure_loggers(logs_dir)
        configure_loggers(logs_dir)

        assert os.path.exists(os.path.join(logs_dir, "pipeline.log"))
        assert os.path.exists(os.path.join(logs_dir, "linkedin.log"))

        file_handlers = [
            h for h in pipeline_logger.handlers
            if isinstance(h, RotatingFileHandler) and h.baseFilename.startswith(logs_dir)
        ]
        assert len(file_handlers) == 1
    finally:
        for logger in logger_module._KNOWN_LOGGERS.values():
            for handler in logger.handlers[:]:
                if isinstance(handler, RotatingFileHandler) and handler.baseFilename.startswith(logs_dir):
                    handler.close()
                    logger.removeHandler(handler)
