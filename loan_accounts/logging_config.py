"""
Structured Logging Configuration Module

One JSON object per line (or plain text for local runs) for loan account
operations. Structured fields are attached to records by log_action and
picked up by JSONFormatter.
"""

import logging
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional

ROOT_LOGGER = "loan_accounts"

TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Record attributes copied into the JSON entry when set
STRUCTURED_FIELDS = ("correlation_id", "user_id", "action", "resource", "extra")


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in STRUCTURED_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_entry[field] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_logging(level: str = "INFO", log_format: str = "json",
                  logger_name: str = ROOT_LOGGER) -> logging.Logger:
    """
    Attach a single stream handler to the package logger.

    Args:
        level: Log level name, case-insensitive
        log_format: "json" for structured output, "text" for plain lines
        logger_name: Logger to configure

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(logger_name)

    # Re-running setup must not stack handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    if log_format.lower() == "text":
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    else:
        handler.setFormatter(JSONFormatter())

    logger.addHandler(handler)
    logger.setLevel(level.upper())
    logger.propagate = False

    return logger


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """Get logger instance"""
    return logging.getLogger(name)


def log_action(logger: logging.Logger, level: str, message: str,
               user_id: Optional[str] = None, action: Optional[str] = None,
               resource: Optional[str] = None, correlation_id: Optional[str] = None,
               extra: Optional[Dict[str, Any]] = None):
    """
    Log a loan account action with structured fields.

    Args:
        logger: Logger instance
        level: Level name (info, warning, ...)
        message: Log message
        user_id: Login of the acting or owning user
        action: Action name, e.g. create_loan_account
        resource: Affected resource, e.g. loanAccount:<id>
        correlation_id: Request correlation id
        extra: Additional structured data
    """
    fields = {
        "user_id": user_id,
        "action": action,
        "resource": resource,
        "correlation_id": correlation_id,
        "extra": extra,
    }
    logger.log(
        logging.getLevelName(level.upper()), message,
        extra={key: value for key, value in fields.items() if value},
        stacklevel=2
    )
