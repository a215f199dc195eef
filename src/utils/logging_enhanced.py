"""Structured event logging for portfolio changes.

This module extends the basic logging with portfolio-specific event logging,
log rotation, and structured JSON formatting for later analysis.
"""

import json
import logging
import logging.handlers
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any


class PortfolioEventType(Enum):
    """Types of portfolio events to log."""

    # Holding lifecycle
    HOLDING_ADDED = "holding_added"
    HOLDING_MERGED = "holding_merged"
    HOLDING_EDITED = "holding_edited"
    HOLDING_DELETED = "holding_deleted"

    # Analysis
    ADVISORIES_GENERATED = "advisories_generated"

    # Errors
    STORAGE_ERROR = "storage_error"
    INPUT_REJECTED = "input_rejected"


class PortfolioEventLogger:
    """Logger for portfolio events with rotation and structured output.

    Holding lifecycle events go to ``holdings.log``, analysis events to
    ``analysis.log`` and errors to ``errors.log``. Each line is a JSON
    object wrapped by the file formatter.

    Example:
        >>> events = PortfolioEventLogger(log_dir="logs")
        >>> events.log_holding_event(
        ...     PortfolioEventType.HOLDING_ADDED,
        ...     holding_id="6f1c...",
        ...     ticker="INFY",
        ...     quantity=10,
        ... )
    """

    def __init__(
        self,
        log_dir: str | Path = "logs",
        max_bytes: int = 5 * 1024 * 1024,  # 5 MB
        backup_count: int = 10,
        enable_console: bool = False,
    ):
        """Initialize portfolio event logger.

        Args:
            log_dir: Directory for log files
            max_bytes: Maximum size per log file (default 5 MB)
            backup_count: Number of rotated files to keep (default 10)
            enable_console: Also log to console (default False)
        """
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.max_bytes = max_bytes
        self.backup_count = backup_count
        self.enable_console = enable_console

        self.holding_logger = self._create_rotating_logger("holdings")
        self.analysis_logger = self._create_rotating_logger("analysis")
        self.error_logger = self._create_rotating_logger("errors", level=logging.ERROR)

    def _create_rotating_logger(
        self,
        name: str,
        level: int = logging.INFO,
    ) -> logging.Logger:
        """Create a rotating file logger named ``portfolio.<name>``."""
        logger = logging.getLogger(f"portfolio.{name}")
        logger.setLevel(level)
        logger.propagate = False

        for handler in list(logger.handlers):
            handler.close()
        logger.handlers = []

        file_handler = logging.handlers.RotatingFileHandler(
            filename=self.log_dir / f"{name}.log",
            maxBytes=self.max_bytes,
            backupCount=self.backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter(
                '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "event": %(message)s}'
            )
        )
        logger.addHandler(file_handler)

        if self.enable_console:
            console_handler = logging.StreamHandler()
            console_handler.setLevel(level)
            console_handler.setFormatter(
                logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
            )
            logger.addHandler(console_handler)

        return logger

    def _log_structured_event(
        self,
        logger: logging.Logger,
        event_type: PortfolioEventType,
        level: str = "info",
        **data: Any,
    ) -> None:
        event = {
            "event_type": event_type.value,
            "timestamp": datetime.now().isoformat(),
            **data,
        }
        getattr(logger, level)(json.dumps(event, default=str))

    def log_holding_event(
        self,
        event_type: PortfolioEventType,
        holding_id: str,
        ticker: str,
        **extra: Any,
    ) -> None:
        """Log a holding lifecycle event.

        Args:
            event_type: One of the HOLDING_* event types
            holding_id: Id of the affected holding
            ticker: Ticker of the affected holding
            **extra: Additional event data (quantities, prices, sector)
        """
        self._log_structured_event(
            self.holding_logger,
            event_type,
            holding_id=holding_id,
            ticker=ticker,
            **extra,
        )

    def log_advisories(
        self,
        advisory_count: int,
        total_current_value: float,
        **extra: Any,
    ) -> None:
        """Log that a set of rebalancing advisories was generated."""
        self._log_structured_event(
            self.analysis_logger,
            PortfolioEventType.ADVISORIES_GENERATED,
            advisory_count=advisory_count,
            total_current_value=total_current_value,
            **extra,
        )

    def log_error(
        self,
        event_type: PortfolioEventType,
        error: str,
        **extra: Any,
    ) -> None:
        """Log an error event."""
        self._log_structured_event(
            self.error_logger, event_type, level="error", error=error, **extra
        )
