"""
Loguru configuration for the application.

This module configures loguru with:
- Automatic Trace ID in each log
- Configurable format from settings
- Redirection of standard library logs to loguru
- Redaction of sensitive request values
"""

import logging
import sys
from typing import Any

from loguru import logger

from sidrotator.config import settings
from sidrotator.core.trace_context import current_trace_id

REDACTED = "<redacted>"


def add_trace_id(record: dict[str, Any]) -> bool:
    """
    Adds the trace_id to the log record.

    Args:
        record: Loguru record

    Returns:
        True to indicate that the filter passed
    """
    record["extra"]["trace_id"] = current_trace_id()
    return True


def configure_logger() -> None:
    """
    Configures loguru with application settings.

    Removes the default loguru handler and adds a stderr sink using the
    level and format from settings.
    """
    logger.remove()

    logger.add(
        sink=sys.stderr,
        level=settings.log_level.upper(),
        format=settings.log_format,
        filter=add_trace_id,
        colorize=True,
        serialize=False,
        backtrace=True,
        diagnose=settings.debug,
        enqueue=settings.logger_enqueue,
    )


def redact(value: str | None, reveal: bool = False) -> str:
    """
    Render a sensitive value for logging.

    Args:
        value: Value to render (signature, certificate, ...)
        reveal: Return the value unchanged (debug logging)

    Returns:
        The value itself when revealed, otherwise a placeholder with its length
    """
    if value is None:
        return "None"
    if reveal:
        return value
    return f"{REDACTED} ({len(value)} chars)"


configure_logger()


__all__ = ["logger", "InterceptHandler", "redact"]


class InterceptHandler(logging.Handler):
    """
    Handler to redirect standard logging logs to loguru.

    Captures logs from libraries that use standard logging
    (uvicorn, httpx) and processes them with loguru.
    """

    def emit(self, record: logging.LogRecord) -> None:
        """
        Redirects a standard logging record to loguru.

        Args:
            record: logging.LogRecord record
        """
        loguru_logger = logger.opt(depth=6, exception=record.exc_info)
        loguru_logger.log(record.levelname, record.getMessage())


def intercept_standard_logging() -> None:
    """
    Configures redirection of standard logging to loguru.

    Call this function in main.py when initializing the app.
    """
    logging.basicConfig(handlers=[InterceptHandler()], level=logging.INFO)

    for logger_name in [
        "uvicorn",
        "uvicorn.access",
        "uvicorn.error",
        "httpx",
        "fastapi",
    ]:
        logging_logger = logging.getLogger(logger_name)
        logging_logger.handlers = [InterceptHandler()]
        logging_logger.propagate = False
