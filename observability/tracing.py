"""Optional Logfire tracing for enrichment batches.

When ENABLE_LOGFIRE is set, Logfire is configured once at startup and the
OpenAI client is instrumented. Each batch then appears as an
`enrich_batch` span with one `enrich_article` child per identifier, and
every AI request nests under the article that made it.

With tracing off (or logfire not installed), trace_operation still times
the block and logs the duration at DEBUG, so call sites need no branches.

Requirements:
    pip install logfire    # or: pip install -e ".[logfire]"

Usage:
    >>> setup_tracing(enabled=True, token=config.logfire_token)
    >>> with trace_operation("enrich_article", {"article_id": "a1"}) as attrs:
    ...     attrs["status"] = "success"
"""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Generator

logger = logging.getLogger(__name__)

SERVICE_NAME = "article-enrichment"


@dataclass
class TracingContext:
    """Process-wide tracing state."""
    enabled: bool = False
    service_name: str = SERVICE_NAME
    token: str = ""
    _logfire_configured: bool = field(default=False, init=False)

    @property
    def active(self) -> bool:
        return self.enabled and self._logfire_configured


_context = TracingContext()


def setup_tracing(
    enabled: bool = False,
    service_name: str = SERVICE_NAME,
    token: str = "",
) -> TracingContext:
    """Configure Logfire and instrument the OpenAI client.

    Tracing problems never stop the service: a missing package or a failed
    configure call leaves tracing disabled and is logged.

    Args:
        enabled: Whether to enable tracing
        service_name: Service name reported to Logfire
        token: Logfire write token (optional for local collectors)

    Returns:
        The process-wide TracingContext
    """
    _context.enabled = enabled
    _context.service_name = service_name
    _context.token = token
    _context._logfire_configured = False

    if not enabled:
        logger.debug("Tracing disabled")
        return _context

    try:
        import logfire
    except ImportError:
        logger.warning("ENABLE_LOGFIRE is set but logfire is not installed; tracing disabled")
        _context.enabled = False
        return _context

    try:
        logfire.configure(service_name=service_name, token=token or None)
        logfire.instrument_openai()
    except Exception as e:
        logger.error("Logfire setup failed, tracing disabled | error=%s", e)
        _context.enabled = False
        return _context

    _context._logfire_configured = True
    logger.info("Logfire tracing enabled | service=%s", service_name)
    return _context


@contextmanager
def trace_operation(
    name: str,
    attributes: dict[str, Any] | None = None,
) -> Generator[dict[str, Any], None, None]:
    """Open a span around a batch or article step.

    Attributes written into the yielded dict are attached to the span when
    the block exits (e.g. the article's terminal status). An exception
    escaping the block is recorded as `error` before it propagates.

    Args:
        name: Span name
        attributes: Attributes known when the span opens
    """
    result_attrs: dict[str, Any] = {}
    start = time.monotonic()

    if not _context.active:
        try:
            yield result_attrs
        finally:
            logger.debug("Operation '%s' completed in %.2fs", name, time.monotonic() - start)
        return

    import logfire

    with logfire.span(name, **(attributes or {})) as span:
        try:
            yield result_attrs
        except Exception as e:
            result_attrs["error"] = f"{type(e).__name__}: {e}"
            raise
        finally:
            for key, value in result_attrs.items():
                span.set_attribute(key, value)
            logger.debug("Operation '%s' completed in %.2fs", name, time.monotonic() - start)
