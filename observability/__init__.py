"""Observability infrastructure for logging and tracing.

setup_logging:
    Console + rotating file logging with batch/article context.

setup_tracing / trace_operation:
    Optional Logfire spans around batches and articles.

Example:
    >>> from observability import setup_logging, trace_operation
    >>> setup_logging(config)
    >>> with trace_operation("enrich_batch", {"size": 3}):
    ...     pass
"""

from observability.logging import (
    clear_context,
    set_article_context,
    set_batch_context,
    setup_logging,
)
from observability.tracing import TracingContext, setup_tracing, trace_operation

__all__ = [
    "clear_context",
    "set_article_context",
    "set_batch_context",
    "setup_logging",
    "setup_tracing",
    "trace_operation",
    "TracingContext",
]
