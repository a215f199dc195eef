"""Logging configuration for Portfolio Tracker.

This module provides logging setup with configurable output format,
driven either by explicit arguments or by the ``logging`` section of the
YAML configuration.
"""

import logging
import sys
from pathlib import Path
from typing import Any

from src.utils.config import Config

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    level: str = "INFO",
    log_format: str | None = None,
    log_file: str | Path | None = None,
) -> None:
    """Configure logging for the application.

    Sets up the root logger with specified level and format. Logs go to
    stdout, and additionally to ``log_file`` when one is given.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Custom format string. If None, uses default format.
        log_file: Optional path of a file to append log lines to

    Example:
        >>> from src.utils.logging import setup_logging
        >>> setup_logging(level="DEBUG")
        >>> import logging
        >>> logging.info("Portfolio loaded")
    """
    if log_format is None:
        log_format = DEFAULT_FORMAT

    # Unknown level names fall back to INFO
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))

    logging.basicConfig(
        level=numeric_level,
        format=log_format,
        handlers=handlers,
        force=True,  # Override any existing configuration
    )


def setup_logging_from_config(config: Config) -> None:
    """Configure logging from the ``logging`` section of a Config.

    Args:
        config: Loaded application configuration
    """
    setup_logging(
        level=config.get("logging.level", "INFO"),
        log_format=config.get("logging.format"),
        log_file=config.get("logging.file"),
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a module.

    Args:
        name: Logger name (typically __name__ of the module)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def log_with_context(
    logger: logging.Logger,
    level: str,
    message: str,
    **context: Any,
) -> None:
    """Log a message with structured context.

    Context is appended to the message in key=value format.

    Args:
        logger: Logger instance
        level: Log level (debug, info, warning, error, critical)
        message: Log message
        **context: Additional context fields

    Example:
        >>> logger = get_logger(__name__)
        >>> log_with_context(
        ...     logger, "info", "Holding added",
        ...     ticker="INFY", quantity=10, sector="Indian Equities"
        ... )
        # Logs: "Holding added | ticker=INFY quantity=10 sector=Indian Equities"
    """
    log_func = getattr(logger, level.lower())

    if context:
        context_str = " ".join(f"{k}={v}" for k, v in context.items())
        full_message = f"{message} | {context_str}"
    else:
        full_message = message

    log_func(full_message)
