"""
Logging utilities for the queue core.

This module provides logging setup with:
- Configurable log levels and output destinations
- Log rotation for file handlers
- Queue context (teacher and date) on every record
- Structured log format
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, MutableMapping, Optional, Tuple


class QueueContextFilter(logging.Filter):
    """
    Logging filter that makes sure every record carries a queue key.

    Records logged through queue_logger() already have one; anything else
    gets "-" so the format string never fails.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Add the queue_key attribute when missing.

        Args:
            record: Log record to filter

        Returns:
            Always True (allows all records through)
        """
        if not hasattr(record, "queue_key"):
            record.queue_key = "-"
        return True


class QueueLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that tags records with "teacher@date"."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        extra.setdefault("queue_key", self.extra["queue_key"])
        kwargs["extra"] = extra
        return msg, kwargs


def queue_logger(logger: logging.Logger, teacher_id: str, date: str) -> QueueLoggerAdapter:
    """
    Wrap a module logger with a teacher-day context.

    Examples:
        >>> log = queue_logger(logging.getLogger(__name__), "t1", "2025-06-01")
        >>> log.info("Queue optimised")
    """
    return QueueLoggerAdapter(logger, {"queue_key": f"{teacher_id}@{date}"})


def setup_logger(
    name: str = "classboard",
    level: int = logging.INFO,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Set up and configure a logger instance.

    Args:
        name: Logger name (default: "classboard")
        level: Logging level (default: logging.INFO)
        log_file: Optional path to log file for file output

    Returns:
        Configured logger instance

    Examples:
        >>> # Basic console logging
        >>> logger = setup_logger()
        >>> logger.info("Application started")

        >>> # File logging with rotation
        >>> logger = setup_logger(
        ...     name="classboard",
        ...     level=logging.DEBUG,
        ...     log_file="output/logs/classboard.log"
        ... )
    """
    logger = logging.getLogger(name)

    # Avoid duplicate handlers
    if logger.handlers:
        return logger

    logger.setLevel(level)

    # Define log format
    formatter = logging.Formatter(
        fmt='%(asctime)s [%(levelname)s] %(name)s:%(funcName)s:%(lineno)d [%(queue_key)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    context_filter = QueueContextFilter()

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.addFilter(context_filter)
    logger.addHandler(console_handler)

    # File handler with rotation (if log file specified)
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        file_handler.addFilter(context_filter)
        logger.addHandler(file_handler)

    return logger
