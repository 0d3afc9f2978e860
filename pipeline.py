"""Batch orchestration for article enrichment.

Pipeline Flow:
    1. VALIDATE: Reject missing, empty, or malformed identifier lists
    2. ENRICH: For each identifier, in input order and one at a time:
       dedup check → fetch → content gate → generate → persist
    3. PACE: Sleep a fixed delay between articles (not after the last)
    4. REPORT: Bucket outcomes into processed / skipped / failed

Articles are processed strictly sequentially. This serializes calls to the
rate-limited AI endpoint and keeps the dedup check race-free: two runs for
the same identifier can never both pass it.
"""

import asyncio
import logging
import uuid
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from agents.responder import AIResponder
from config import Config
from database import DocumentStore, open_store
from enricher import ArticleEnricher
from errors import RequestValidationError
from models.outcome import BatchOutcome
from observability.logging import clear_context, set_article_context, set_batch_context
from observability.tracing import trace_operation

logger = logging.getLogger(__name__)

NO_IDS_MESSAGE = "No article IDs provided. Expected a non-empty 'articleIds' list."


def validate_article_ids(article_ids: Any) -> list[str]:
    """Validate batch input before any processing.

    Args:
        article_ids: Candidate identifier sequence

    Returns:
        The identifiers as a list, order preserved

    Raises:
        RequestValidationError: If input is missing, not a list/tuple, empty,
            or contains anything other than non-empty strings
    """
    if not isinstance(article_ids, (list, tuple)) or not article_ids:
        raise RequestValidationError(NO_IDS_MESSAGE)
    invalid = [i for i, value in enumerate(article_ids) if not isinstance(value, str) or not value.strip()]
    if invalid:
        raise RequestValidationError(
            f"Invalid article IDs at positions {invalid}: each ID must be a non-empty string"
        )
    return list(article_ids)


class BatchCoordinator:
    """Runs the enricher over a batch of identifiers.

    Example:
        >>> coordinator = BatchCoordinator(config, enricher)
        >>> batch = await coordinator.run(["a1", "a2"])
        >>> batch.summary_dict()
        {'total': 2, 'processed': 1, 'skipped': 1, 'failed': 0}
    """

    def __init__(
        self,
        config: Config,
        enricher: ArticleEnricher,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """Initialize the coordinator.

        Args:
            config: Application configuration (pacing delay)
            enricher: Per-article enricher
            sleep: Awaitable sleep used for pacing (replaceable in tests)
        """
        self.config = config
        self.enricher = enricher
        self._sleep = sleep

    async def run(self, article_ids: Sequence[str]) -> BatchOutcome:
        """Enrich every identifier and return the aggregate outcome.

        Raises:
            RequestValidationError: If the identifier list is invalid
        """
        ids = validate_article_ids(article_ids)
        batch = BatchOutcome(batch_id=uuid.uuid4().hex[:8])
        set_batch_context(batch.batch_id)
        delay = self.config.pacing_delay_seconds

        logger.info("Batch started | articles=%d pacing=%.1fs", len(ids), delay)
        try:
            with trace_operation("enrich_batch", {"batch_id": batch.batch_id, "size": len(ids)}) as attrs:
                for index, article_id in enumerate(ids):
                    set_article_context(article_id)
                    with trace_operation("enrich_article", {"article_id": article_id}) as item_attrs:
                        outcome = await self.enricher.enrich(article_id)
                        item_attrs["status"] = outcome.status.value
                    batch.add(outcome)
                    logger.debug(
                        "Progress: %d/%d | article_id=%s status=%s",
                        index + 1, len(ids), article_id, outcome.status.value,
                    )
                    if delay > 0 and index < len(ids) - 1:
                        await self._sleep(delay)
                attrs.update(batch.summary_dict())
        finally:
            batch.finish()
            logger.info(
                "Batch done | duration=%.1fs processed=%d skipped=%d failed=%d fallbacks=%d",
                batch.duration, len(batch.processed), len(batch.skipped),
                len(batch.failed), batch.fallbacks,
            )
            clear_context()
        return batch


async def run_batch(
    config: Config,
    article_ids: Sequence[str],
    store: DocumentStore | None = None,
    responder: Any | None = None,
) -> BatchOutcome:
    """Run one batch, opening (and closing) a store and responder when not given.

    Args:
        config: Application configuration
        article_ids: Identifiers to enrich
        store: Optional existing store (not closed here)
        responder: Optional existing responder (not closed here)
    """
    ids = validate_article_ids(article_ids)
    own_store = store is None
    own_responder = responder is None
    store = store if store is not None else open_store(config)
    try:
        responder = responder if responder is not None else AIResponder(config)
        try:
            coordinator = BatchCoordinator(config, ArticleEnricher(config, store, responder))
            return await coordinator.run(ids)
        finally:
            if own_responder:
                await responder.aclose()
    finally:
        if own_store:
            await store.aclose()
