"""Structured logging utilities."""

import logging
import sys
from pathlib import Path
from typing import Any

ROOT_LOGGER = "cert_preflight"


class StructuredFormatter(logging.Formatter):
    """Formatter that appends key=value fields to log messages."""

    def format(self, record: logging.LogRecord) -> str:
        extra = ""
        if hasattr(record, "extra_fields"):
            fields = getattr(record, "extra_fields")
            if fields:
                extra = " " + " ".join(f"{k}={v}" for k, v in fields.items())

        message = super().format(record)
        return f"{message}{extra}"


def configure_logging(
    level: str = "INFO",
    format_string: str | None = None,
    structured: bool = False,
    log_file: Path | str | None = None,
) -> None:
    """Configure logging for cert-preflight.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_string: Custom format string
        structured: Use the timestamped structured format
        log_file: Also write log lines to this file
    """
    if format_string is None:
        if structured:
            format_string = "%(asctime)s %(levelname)s %(name)s %(message)s"
        else:
            format_string = "%(levelname)s: %(message)s"

    # Fields are always rendered; the structured flag only changes the prefix
    formatter = StructuredFormatter(format_string)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    for handler in handlers:
        handler.setFormatter(formatter)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, level.upper()))
    logger.handlers = handlers
    logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a cert-preflight module.

    Args:
        name: Module name (will be prefixed with cert_preflight)

    Returns:
        Configured logger
    """
    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


class LoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds extra fields to log messages."""

    def process(
        self, msg: str, kwargs: dict[str, Any]
    ) -> tuple[str, dict[str, Any]]:
        extra = kwargs.get("extra", {})
        fields = dict(self.extra)
        fields.update(extra.get("extra_fields", {}))
        extra["extra_fields"] = fields
        kwargs["extra"] = extra
        return msg, kwargs


def get_logger_with_context(name: str, **context: Any) -> LoggerAdapter:
    """Get a logger with additional context fields.

    Args:
        name: Module name
        **context: Context fields to include in all log messages

    Returns:
        LoggerAdapter with context
    """
    logger = get_logger(name)
    return LoggerAdapter(logger, context)
