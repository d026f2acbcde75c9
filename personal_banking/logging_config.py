"""
Structured Logging Configuration Module

Ledger events are emitted as one JSON object per line. Each record carries
the optional ``action``, ``resource`` and ``extra`` attributes set by
``log_action`` so operations can be filtered by account number.
"""

import logging
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional


TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Attributes copied from the LogRecord when present
STRUCTURED_FIELDS = ("action", "resource", "extra")


class JSONFormatter(logging.Formatter):
    """Render a LogRecord as a single JSON line"""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in STRUCTURED_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                entry[name] = value

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def _build_handler(log_format: str, log_file: Optional[str]) -> logging.Handler:
    handler = logging.FileHandler(log_file) if log_file else logging.StreamHandler()
    formatter = JSONFormatter() if log_format == "json" else logging.Formatter(TEXT_FORMAT)
    handler.setFormatter(formatter)
    return handler


def setup_logging(level: str = "INFO", logger_name: str = "bank",
                  log_format: str = "json", log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the application logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        logger_name: Root of the logger hierarchy to configure
        log_format: "json" for structured output, anything else for plain text
        log_file: Write to this file instead of stderr

    Returns:
        The configured logger
    """
    logger = logging.getLogger(logger_name)

    # Calling twice must not duplicate output
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(_build_handler(log_format, log_file))
    logger.setLevel(level.upper())
    logger.propagate = False

    return logger


def get_logger(name: str = "bank") -> logging.Logger:
    """Get logger instance"""
    return logging.getLogger(name)


def log_action(logger: logging.Logger, level: str, message: str,
               action: Optional[str] = None, resource: Optional[str] = None,
               extra: Optional[dict] = None):
    """
    Log a ledger event with structured fields attached to the record.

    Args:
        logger: Logger instance
        level: Level name such as "info" or "warning"
        message: Human readable message
        action: Event name, e.g. "deposit"
        resource: Identifier of the affected account
        extra: Additional structured data
    """
    fields = {"action": action, "resource": resource, "extra": extra}
    logger.log(
        logging.getLevelName(level.upper()),
        message,
        extra={k: v for k, v in fields.items() if v},
    )
