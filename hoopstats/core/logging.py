"""
Structured logging with JSON formatting and correlation ID support.

Every request gets a correlation ID (see middleware.py) that is attached to
all log lines emitted while handling it. Services pass game/player context
through ``extra=`` and it ends up under the ``extra`` key of the JSON line:

    logger.info("Substitution recorded", extra={"game_id": game.id, "player_in": pid})
"""
import logging
import json
import sys
from datetime import datetime
from typing import Any
from contextvars import ContextVar

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

# Attributes every LogRecord carries; anything else came in through ``extra=``
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime", "taskName"}


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS}


class JSONFormatter(logging.Formatter):
    """
    JSON log formatter for structured logging.

    Fields: timestamp, level, logger, message, correlation_id, and when
    present exception and extra.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": correlation_id_var.get(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra = _extra_fields(record)
        if extra:
            log_data["extra"] = extra

        return json.dumps(log_data, default=str)


class ColoredFormatter(logging.Formatter):
    """Human-readable colored console formatter for development."""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors."""
        level_color = self.COLORS.get(record.levelname, "")
        base_msg = f"{level_color}[{record.levelname}]{self.RESET} {record.name}: {record.getMessage()}"

        extra = _extra_fields(record)
        if extra:
            base_msg += " " + " ".join(f"{k}={v}" for k, v in extra.items())

        correlation_id = correlation_id_var.get()
        if correlation_id:
            base_msg += f" | correlation_id={correlation_id}"

        if record.exc_info:
            base_msg += "\n" + self.formatException(record.exc_info)

        return base_msg


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
    handler: logging.Handler | None = None,
) -> None:
    """
    Configure structured logging for the application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, use JSON formatter. If False, use colored console formatter.
        handler: Optional custom handler. If None, creates StreamHandler to stdout.
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    log_level = getattr(logging, level.upper(), logging.INFO)
    root_logger.setLevel(log_level)

    if handler is None:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(log_level)

    handler.setFormatter(JSONFormatter() if json_output else ColoredFormatter())
    root_logger.addHandler(handler)

    # Reduce noise from third-party loggers
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance (typically ``get_logger(__name__)``)."""
    return logging.getLogger(name)


def set_correlation_id(correlation_id: str) -> Any:
    """Set the correlation ID in the context; returns a reset token."""
    return correlation_id_var.set(correlation_id)


def get_correlation_id() -> str:
    """Get the current correlation ID, or an empty string if unset."""
    return correlation_id_var.get()


def clear_correlation_id(token: Any) -> None:
    """Reset the correlation ID using the token from set_correlation_id."""
    correlation_id_var.reset(token)
