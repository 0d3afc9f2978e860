"""Logging utilities with structured output and context propagation.

This module provides:
    - JSON structured logging for log aggregation systems
    - Batch ID and article ID context propagation across all log messages
    - Console plus rotating file output

Usage:
    >>> from observability.logging import setup_logging, set_batch_context
    >>> setup_logging(config)
    >>> set_batch_context(batch_id="abc123")
    >>> logger.info("Batch started")  # Includes batch_id automatically
"""

import contextvars
import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler
from typing import Any

# Context variables propagated into every log record
batch_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("batch_id", default="-")
article_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("article_id", default="-")

_RESERVED_ATTRS = frozenset({
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "taskName", "batch_id", "article_id", "message",
})


def set_batch_context(batch_id: str) -> None:
    """Set the current batch ID for log context propagation."""
    batch_id_var.set(batch_id)


def set_article_context(article_id: str) -> None:
    """Set the article currently being enriched."""
    article_id_var.set(article_id)


def clear_context() -> None:
    """Clear all logging context variables."""
    batch_id_var.set("-")
    article_id_var.set("-")


class ContextFilter(logging.Filter):
    """Filter that injects batch_id and article_id into log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.batch_id = batch_id_var.get()
        record.article_id = article_id_var.get()
        return True


class JsonFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Output format:
        {"timestamp": "...", "level": "INFO", "logger": "...", "message": "...", ...}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "batch_id": getattr(record, "batch_id", "-"),
        }

        article_id = getattr(record, "article_id", "-")
        if article_id != "-":
            log_data["article_id"] = article_id

        if record.levelno >= logging.WARNING:
            log_data["source"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Fields passed through `extra=`
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS:
                continue
            try:
                json.dumps(value)
                log_data[key] = value
            except (TypeError, ValueError):
                log_data[key] = str(value)

        return json.dumps(log_data, ensure_ascii=False)


class TextFormatter(logging.Formatter):
    """Text formatter with context information.

    Format: TIMESTAMP [LEVEL] [batch_id] logger: message
    """

    def __init__(self, include_date: bool = False):
        datefmt = "%Y-%m-%d %H:%M:%S" if include_date else "%H:%M:%S"
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] [%(batch_id)s] %(name)s: %(message)s",
            datefmt=datefmt,
        )


LOG_FILE_NAME = "enrichment.log"

# Chatty libraries that only matter at WARNING and above
_QUIET_LOGGERS = ("aiohttp", "urllib3", "httpx", "httpcore", "openai", "asyncio")


def _file_handler(config: Any) -> logging.Handler:
    """Build the rotating file handler for LOG_DIR/enrichment.log.

    Size-based rotation when LOG_MAX_BYTES is set, otherwise daily rotation.

    Raises:
        OSError: If the log directory cannot be created or written
    """
    config.log_dir.mkdir(parents=True, exist_ok=True)
    probe = config.log_dir / ".write_test"
    probe.touch()
    probe.unlink()

    path = config.log_dir / LOG_FILE_NAME
    if config.log_max_bytes > 0:
        return RotatingFileHandler(
            path,
            maxBytes=config.log_max_bytes,
            backupCount=config.log_backup_count,
            encoding="utf-8",
        )
    return TimedRotatingFileHandler(
        path,
        when="midnight",
        backupCount=config.log_backup_count,
        encoding="utf-8",
    )


def setup_logging(config: Any, verbose: bool = False) -> bool:
    """Route all logging to stderr and a rotating file.

    Console output goes to stderr so JSON printed by the CLI on stdout stays
    machine-readable. An unwritable LOG_DIR degrades to console-only.

    Args:
        config: Application configuration with logging settings
        verbose: Force DEBUG on the console regardless of LOG_LEVEL

    Returns:
        True if file logging is enabled, False if console-only
    """
    json_format = config.log_format == "json"
    context_filter = ContextFilter()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.DEBUG if verbose else getattr(logging, config.log_level, logging.INFO))
    console.setFormatter(JsonFormatter() if json_format else TextFormatter())
    console.addFilter(context_filter)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    root.addHandler(console)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    try:
        file_handler = _file_handler(config)
    except OSError as e:
        print(
            f"Warning: Cannot write to log directory '{config.log_dir}': {e}. "
            "Falling back to console-only logging.",
            file=sys.stderr,
        )
        return False

    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(JsonFormatter() if json_format else TextFormatter(include_date=True))
    file_handler.addFilter(context_filter)
    root.addHandler(file_handler)
    return True
