"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of RPREPORT, licensed under the MIT License.
See LICENSE file for details.
"""

"""Logging infrastructure with correlation IDs and redaction.

Reporting calls are issued from inside a running test process, so every record
emitted by the client carries a correlation ID tying it to the current launch
and has credentials scrubbed before it reaches a handler.
"""

import json
import logging
import os
import re
import sys
import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime
from re import Pattern
from typing import Any

from rich.logging import RichHandler

ROOT_LOGGER_NAME = "rpreport"

_correlation_id: ContextVar[str] = ContextVar("rpreport_correlation_id", default="")


class CorrelationIdManager:
    """
    Manages correlation IDs for the current execution context.

    IDs live in a context variable, so threads and asyncio tasks each see
    their own value.
    """

    def get_correlation_id(self) -> str:
        """Get the current correlation ID or generate a new one."""
        current = _correlation_id.get()
        if not current:
            current = f"rp-{uuid.uuid4()}"
            _correlation_id.set(current)
        return current

    def set_correlation_id(self, correlation_id: str) -> None:
        """Set the current correlation ID."""
        _correlation_id.set(correlation_id)

    def clear_correlation_id(self) -> None:
        """Clear the current correlation ID."""
        _correlation_id.set("")

    def has_correlation_id(self) -> bool:
        """Return whether an ID is set for the current context."""
        return bool(_correlation_id.get())


correlation_manager = CorrelationIdManager()


class LogRedactor:
    """
    Redacts sensitive information from log messages.
    """

    def __init__(self) -> None:
        self.patterns: dict[str, Pattern] = {
            "api_key": re.compile(
                r'(api[_-]?key|token)["\']?\s*[:=]\s*["\']?([^"\'&\s]{8,})', re.IGNORECASE
            ),
            "password": re.compile(
                r'(password|passwd|secret)["\']?\s*[:=]\s*["\']?([^"\'&\s]+)', re.IGNORECASE
            ),
            "authorization": re.compile(
                r'(Authorization)["\']?\s*[:=]\s*["\']?(?:Bearer\s+)?([^"\'&\s]{8,})',
                re.IGNORECASE,
            ),
            "bearer_token": re.compile(
                r'(Bearer)\s+(?=[^"\'&\s]*\d)([^"\'&\s]{8,})', re.IGNORECASE
            ),
        }

    def redact(self, message: str) -> str:
        """
        Redact sensitive information from the message.

        Keys are kept so the log line still says what was hidden.
        """
        if not isinstance(message, str):
            return message

        for pattern in self.patterns.values():
            message = pattern.sub(r"\1: [REDACTED]", message)
        return message


redactor = LogRedactor()


class CorrelationIdFilter(logging.Filter):
    """Adds the current correlation ID to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_manager.get_correlation_id()
        return True


class RedactionFilter(logging.Filter):
    """Scrubs credentials from the fully formatted message."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = redactor.redact(message)
        if redacted != message:
            record.msg = redacted
            record.args = ()
        return True


class JSONFormatter(logging.Formatter):
    """
    Formatter that outputs log records as JSON.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if hasattr(record, "correlation_id"):
            log_data["correlation_id"] = record.correlation_id

        if getattr(record, "context_data", None):
            log_data["context"] = record.context_data

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(log_data, default=str)


class RichContextFormatter(logging.Formatter):
    """
    Formatter for Rich console output with context data.
    """

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        include_correlation_id: bool = True,
    ):
        super().__init__(fmt, datefmt)
        self.include_correlation_id = include_correlation_id

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)

        context = getattr(record, "context_data", None)
        if context:
            context_str = " ".join(f"[{k}={v}]" for k, v in context.items())
            message = f"{message} {context_str}"

        if self.include_correlation_id and hasattr(record, "correlation_id"):
            message = f"{message} [correlation_id={record.correlation_id}]"

        return message


@contextmanager
def log_operation(
    logger: logging.Logger,
    operation_name: str,
    level: int = logging.INFO,
    context: dict[str, Any] | None = None,
) -> Iterator[dict[str, Any]]:
    """
    Context manager for logging operations with timing and context tracking.

    The yielded dict is the operation context; callers may add keys to it
    (e.g. the id assigned by the service) before the completion record is
    written. A failure is logged once at ERROR and re-raised.

    Args:
    ----
        logger: The logger instance to use
        operation_name: Name of the operation being performed
        level: Log level for the start and completion records
        context: Additional context data to include in the logs

    """
    start_time = time.time()
    context = dict(context or {})
    context["operation_id"] = str(uuid.uuid4())[:8]

    logger.log(level, f"Starting {operation_name}", extra={"context_data": context})

    try:
        yield context
    except Exception as e:
        duration = time.time() - start_time
        error_context = {
            **context,
            "error_type": type(e).__name__,
            "duration": f"{duration:.2f}s",
        }
        logger.error(
            f"Failed {operation_name} after {duration:.2f}s: {e}",
            extra={"context_data": error_context},
        )
        raise

    duration = time.time() - start_time
    logger.log(
        level,
        f"Completed {operation_name} in {duration:.2f}s",
        extra={"context_data": context},
    )


@contextmanager
def correlation_id(correlation_id: str | None = None) -> Iterator[str]:
    """
    Context manager for setting a correlation ID for the current context.

    Args:
    ----
        correlation_id: ID to use, or None to generate a new one

    Yields:
    ------
        str: The current correlation ID (either provided or generated)

    """
    token = _correlation_id.set(correlation_id or f"rp-{uuid.uuid4()}")
    try:
        yield _correlation_id.get()
    finally:
        _correlation_id.reset(token)


def configure_logging(
    level: int | str = logging.INFO,
    log_file: str | None = None,
    json_format: bool = False,
    include_timestamp: bool = True,
    use_rich: bool = True,
    debug: bool = False,
    include_correlation_id: bool = True,
    fmt: str = "%(message)s",
    date_format: str = "[%X]",
) -> None:
    """
    Configure logging for the rpreport logger hierarchy.

    Args:
    ----
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL or integer)
        log_file: Optional path to log file
        json_format: Whether to use JSON format for logs
        include_timestamp: Whether to include timestamps in logs
        use_rich: Whether to use Rich for console output
        debug: Whether to force debug mode
        include_correlation_id: Whether console lines show the correlation ID
        fmt: Message format of the Rich console handler
        date_format: Time format of console and file timestamps

    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())

    if debug:
        level = logging.DEBUG

    format_str = (
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
        if include_timestamp
        else "[%(levelname)s] %(name)s: %(message)s"
    )

    handlers: list[logging.Handler] = []

    if json_format:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(JSONFormatter())
    elif use_rich:
        console_handler = RichHandler(
            rich_tracebacks=True,
            markup=False,
            show_time=include_timestamp,
            log_time_format=date_format,
        )
        console_handler.setFormatter(
            RichContextFormatter(fmt, include_correlation_id=include_correlation_id)
        )
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(
            RichContextFormatter(
                format_str, datefmt=date_format, include_correlation_id=include_correlation_id
            )
        )
    handlers.append(console_handler)

    if log_file:
        os.makedirs(os.path.dirname(os.path.abspath(log_file)), exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            JSONFormatter() if json_format else logging.Formatter(format_str, date_format)
        )
        handlers.append(file_handler)

    for handler in handlers:
        handler.addFilter(CorrelationIdFilter())
        handler.addFilter(RedactionFilter())

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        logger.addHandler(handler)

    logger.debug(f"Logging configured with level {logging.getLevelName(level)}")

