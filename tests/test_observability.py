"""Tests for observability package."""

import json
import logging

from observability.logging import (
    ContextFilter,
    JsonFormatter,
    clear_context,
    set_article_context,
    set_batch_context,
    setup_logging,
)
from observability.tracing import setup_tracing, trace_operation


def _record(msg: str, level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord("enricher", level, __file__, 10, msg, (), None)


class TestJsonFormatter:
    def test_includes_context(self) -> None:
        set_batch_context("b1")
        set_article_context("a1")
        try:
            record = _record("Article enriched | article_id=a1")
            ContextFilter().filter(record)
            data = json.loads(JsonFormatter().format(record))
        finally:
            clear_context()

        assert data["message"] == "Article enriched | article_id=a1"
        assert data["batch_id"] == "b1"
        assert data["article_id"] == "a1"
        assert "source" not in data

    def test_warning_has_source_and_no_article(self) -> None:
        record = _record("Fetch failed", logging.WARNING)
        ContextFilter().filter(record)
        data = json.loads(JsonFormatter().format(record))

        assert data["batch_id"] == "-"
        assert "article_id" not in data
        assert data["source"]["line"] == 10


class TestSetupLogging:
    def test_file_logging(self, config) -> None:
        root = logging.getLogger()
        saved = root.handlers[:]
        try:
            assert setup_logging(config) is True
            logging.getLogger("enricher").info("hello file")
            for handler in root.handlers:
                handler.flush()
            assert "hello file" in (config.log_dir / "enrichment.log").read_text(encoding="utf-8")
        finally:
            for handler in root.handlers[:]:
                root.removeHandler(handler)
                handler.close()
            for handler in saved:
                root.addHandler(handler)


class TestTracing:
    def test_disabled_is_noop(self) -> None:
        context = setup_tracing(enabled=False)
        assert context.enabled is False
        with trace_operation("enrich_article", {"article_id": "a1"}) as attrs:
            attrs["status"] = "success"
        assert attrs == {"status": "success"}
