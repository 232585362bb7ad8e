"""
Structured Logging Configuration Module

Provides JSON-formatted structured logging for all ledger operations.
"""

import logging
import json
from datetime import datetime, timezone
from typing import Optional


ROOT_LOGGER = "bank_ledger"

TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": getattr(record, 'correlation_id', None),
            "action": getattr(record, 'action', None),
            "resource": getattr(record, 'resource', None),
            "extra": getattr(record, 'extra', None)
        }

        # Remove None values
        log_entry = {k: v for k, v in log_entry.items() if v is not None}

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_logging(level: str = "INFO", logger_name: str = ROOT_LOGGER,
                  log_format: str = "json") -> logging.Logger:
    """
    Setup structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        logger_name: Name of the logger
        log_format: "json" for one JSON object per line, "text" for plain lines

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(logger_name)

    # Remove existing handlers to avoid duplicates
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    if log_format == "text":
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    else:
        handler.setFormatter(JSONFormatter())

    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper()))

    # Prevent propagation to avoid duplicate logs
    logger.propagate = False

    return logger


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """Get logger instance"""
    return logging.getLogger(name)


def log_action(logger: logging.Logger, level: str, message: str,
               action: Optional[str] = None, resource: Optional[str] = None,
               correlation_id: Optional[str] = None,
               extra: Optional[dict] = None) -> None:
    """
    Log an action with structured data.

    Args:
        logger: Logger instance
        level: Log level (debug, info, warning, error)
        message: Log message
        action: Action being performed
        resource: Resource being acted upon, e.g. "account:ACC00001"
        correlation_id: Correlation ID for request tracing
        extra: Additional structured data
    """
    levelno = getattr(logging, level.upper())
    if not logger.isEnabledFor(levelno):
        return

    fields = {}
    if action:
        fields['action'] = action
    if resource:
        fields['resource'] = resource
    if correlation_id:
        fields['correlation_id'] = correlation_id
    if extra:
        fields['extra'] = extra

    logger.log(levelno, message, extra=fields)
