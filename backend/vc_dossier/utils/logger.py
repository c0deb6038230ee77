"""
Logger Configuration Module

Provides centralized logging configuration for all pipeline services.
Supports both file and console logging with different formatters.

Key Features:
- Configurable log levels
- File and console output
- Service-specific loggers
- Automatic directory creation
- Rotating file handlers
"""

import os
import logging
from logging.handlers import RotatingFileHandler
from .config import settings


def setup_logger(name: str, log_file: str = None, level: str = None) -> logging.Logger:
    """
    Set up a logger with file and console handlers.

    Args:
        name: Logger name (e.g., 'pipeline', 'linkedin')
        log_file: Optional file name under LOGS_DIR. If None, only console logging is used
        level: Optional log level. If None, uses level from settings

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Remove any existing handlers to prevent duplicates
    if logger.handlers:
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)

    log_level = level or settings.LOG_LEVEL
    logger.setLevel(log_level)
    logger.propagate = False

    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    console_formatter = logging.Formatter(
        '%(levelname)s - %(message)s'
    )

    # Always add console handler
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    if log_file:
        try:
            os.makedirs(settings.LOGS_DIR, exist_ok=True)
            log_path = os.path.join(settings.LOGS_DIR, log_file)
            file_handler = RotatingFileHandler(
                log_path,
                maxBytes=10*1024*1024,  # 10MB
                backupCount=5
            )
            file_handler.setFormatter(file_formatter)
            logger.addHandler(file_handler)
        except OSError as e:
            logger.error(f"Error setting up file handler for {name}: {str(e)}")

    return logger


log_level_name = os.environ.get("LOG_LEVEL", settings.LOG_LEVEL).upper()
log_level = getattr(logging, log_level_name, logging.INFO)

# Initialize service loggers with console logging only
app_logger = setup_logger('app', None, level=log_level)
pipeline_logger = setup_logger('pipeline', None, level=log_level)
llm_logger = setup_logger('llm', None, level=log_level)
search_logger = setup_logger('search', None, level=log_level)
browser_logger = setup_logger('browser', None, level=log_level)
linkedin_logger = setup_logger('linkedin', None, level=log_level)
agents_logger = setup_logger('agents', None, level=log_level)
storage_logger = setup_logger('storage', None, level=log_level)
export_logger = setup_logger('export', None, level=log_level)

LOGGER_FILES = {
    'app': 'app.log',
    'pipeline': 'pipeline.log',
    'llm': 'llm.log',
    'search': 'search.log',
    'browser': 'browser.log',
    'linkedin': 'linkedin.log',
    'agents': 'agents.log',
    'storage': 'storage.log',
    'export': 'export.log',
}

_KNOWN_LOGGERS = {
    'app': app_logger,
    'pipeline': pipeline_logger,
    'llm': llm_logger,
    'search': search_logger,
    'browser': browser_logger,
    'linkedin': linkedin_logger,
    'agents': agents_logger,
    'storage': storage_logger,
    'export': export_logger,
}

# Track if loggers have been reconfigured
_loggers_configured = False


def configure_loggers(logs_dir: str = None):
    """
    Attach rotating file handlers to every service logger.

    Args:
        logs_dir: Directory path for log files, defaults to settings.LOGS_DIR

    Note:
        Safe to call more than once; only the first call has an effect.
    """
    global _loggers_configured
    if _loggers_configured:
        return

    logs_dir = logs_dir or settings.LOGS_DIR
    os.makedirs(logs_dir, exist_ok=True)

    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    for name, log_file in LOGGER_FILES.items():
        logger = _KNOWN_LOGGERS[name]
        file_handler = RotatingFileHandler(
            os.path.join(logs_dir, log_file),
            maxBytes=10*1024*1024,
            backupCount=5
        )
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    app_logger.info(f"Loggers configured with directory: {logs_dir}")
    _loggers_configured = True


def get_logger(name: str, level: str = None) -> logging.Logger:
    """
    Get or create a logger for a component.

    For known services, returns the pre-configured logger.
    For new services, creates a console-only logger.
    """
    if name in _KNOWN_LOGGERS:
        return _KNOWN_LOGGERS[name]

    return setup_logger(name, None, level=level or log_level)


__all__ = [
    'app_logger',
    'pipeline_logger',
    'llm_logger',
    'search_logger',
    'browser_logger',
    'linkedin_logger',
    'agents_logger',
    'storage_logger',
    'export_logger',
    'setup_logger',
    'get_logger',
    'configure_loggers',
]
