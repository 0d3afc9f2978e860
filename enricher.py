"""Per-article enrichment with failure isolation.

State machine for one article identifier:

    dedup check ── record exists ──────────────▶ skipped ("already exists")
        │
    fetch ──────── not found / store error ────▶ failed (stage=fetch)
        │
    content gate ─ too short ──────────────────▶ skipped ("insufficient content")
        │
    generate ───── AI or parse failure ────────▶ fallback content (never fails)
        │
    persist ────── store error ────────────────▶ failed (stage=persist)
        │
        ▼
     success

Any other exception is caught at the enrich() boundary and reported as
failed (stage=unexpected), so one article can never abort a batch.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Protocol

from agents.parser import fallback_enrichment, parse_response
from agents.prompt import build_prompt
from config import Config
from database import DocumentStore
from errors import AiServiceError, DocumentNotFoundError, FetchError, PersistenceError, StoreError
from models.article import Article
from models.enrichment import EnrichmentResult
from models.outcome import REASON_ALREADY_EXISTS, REASON_INSUFFICIENT_CONTENT, ItemOutcome

logger = logging.getLogger(__name__)


class Responder(Protocol):
    """Anything that turns a prompt into raw completion text."""

    async def complete(self, prompt: str, max_tokens: int | None = None) -> str: ...


class ArticleEnricher:
    """Enriches one article at a time.

    Example:
        >>> enricher = ArticleEnricher(config, store, AIResponder(config))
        >>> outcome = await enricher.enrich("a1")
        >>> outcome.status
        <ItemStatus.SUCCESS: 'success'>
    """

    def __init__(self, config: Config, store: DocumentStore, responder: Responder):
        """Initialize the enricher.

        Args:
            config: Application configuration (collections, field names, limits)
            store: Document store holding articles and enrichment records
            responder: AI responder used for generation
        """
        self.config = config
        self.store = store
        self.responder = responder

    async def enrich(self, article_id: str) -> ItemOutcome:
        """Run the full enrichment sequence for one identifier.

        Never raises for item-level problems; the returned outcome carries
        the terminal state.
        """
        try:
            return await self._enrich(article_id)
        except Exception as e:
            logger.error(
                "Enrichment failed | article_id=%s type=%s error=%s",
                article_id, type(e).__name__, e, exc_info=True,
            )
            return ItemOutcome.failed(article_id, str(e) or type(e).__name__, stage="unexpected")

    async def _enrich(self, article_id: str) -> ItemOutcome:
        try:
            if await self.has_record(article_id):
                logger.info("Already enriched, skipping | article_id=%s", article_id)
                return ItemOutcome.skipped(article_id, REASON_ALREADY_EXISTS)
        except StoreError as e:
            logger.error("Dedup check failed | article_id=%s error=%s", article_id, e)
            return ItemOutcome.failed(article_id, f"Dedup check failed: {e}", stage="dedup")

        try:
            article = await self.fetch_article(article_id)
        except FetchError as e:
            logger.error("Fetch failed | article_id=%s error=%s", article_id, e)
            return ItemOutcome.failed(article_id, str(e), stage="fetch")

        if not article.has_content(self.config.min_content_chars):
            logger.info(
                "Insufficient content, skipping | article_id=%s chars=%d min=%d",
                article_id, len(article.content), self.config.min_content_chars,
            )
            return ItemOutcome.skipped(article_id, REASON_INSUFFICIENT_CONTENT)

        result = await self.generate(article)

        try:
            record = await self.persist(article, result)
        except PersistenceError as e:
            logger.error("Persist failed | article_id=%s error=%s", article_id, e)
            return ItemOutcome.failed(article_id, str(e), stage="persist")

        logger.info(
            "Article enriched | article_id=%s record_id=%s fallback=%s title=%s",
            article_id, record["id"], result.is_fallback, article.title[:60],
        )
        return ItemOutcome.success(article_id, article.title, record["id"], result.is_fallback)

    async def has_record(self, article_id: str) -> bool:
        """Check the companion store for an existing enrichment record."""
        existing = await self.store.find_by_field(
            self.config.enrichment_collection,
            self.config.record_fields.article_id,
            article_id,
            limit=1,
        )
        return bool(existing)

    async def fetch_article(self, article_id: str) -> Article:
        """Load the source article.

        Raises:
            FetchError: If the article is missing or the store fails
        """
        try:
            document = await self.store.get_by_id(self.config.articles_collection, article_id)
        except DocumentNotFoundError as e:
            raise FetchError(f"Article not found: {article_id}") from e
        except StoreError as e:
            raise FetchError(f"Failed to fetch article {article_id}: {e}") from e
        return Article.from_document(document, self.config.article_fields, article_id=article_id)

    async def generate(self, article: Article) -> EnrichmentResult:
        """Build the prompt, call the AI, and parse the reply.

        AI failures are absorbed into a fallback result.
        """
        limits = {
            "summary_max_chars": self.config.summary_max_chars,
            "analysis_max_chars": self.config.analysis_max_chars,
            "max_words": self.config.fallback_summary_words,
        }
        prompt = build_prompt(article, self.config.prompt_content_chars)
        try:
            raw = await self.responder.complete(prompt, max_tokens=self.config.ai_max_tokens)
        except AiServiceError as e:
            logger.warning("AI call failed, using fallback | article_id=%s error=%s", article.id, e)
            return fallback_enrichment(article, f"AI error: {e}", **limits)
        return parse_response(raw, article, **limits)

    def build_record(self, article: Article, result: EnrichmentResult) -> dict[str, Any]:
        """Map a result onto the configured record field names."""
        fields = self.config.record_fields
        record: dict[str, Any] = {
            fields.article_id: article.id,
            fields.summary: result.summary,
            fields.content: result.analysis,
        }
        if fields.timestamp:
            record[fields.timestamp] = datetime.now(timezone.utc).isoformat()
        if fields.fallback:
            record[fields.fallback] = result.is_fallback
        return record

    async def persist(self, article: Article, result: EnrichmentResult) -> dict[str, Any]:
        """Write one enrichment record.

        Raises:
            PersistenceError: If the store rejects the write
        """
        try:
            return await self.store.create(
                self.config.enrichment_collection,
                self.build_record(article, result),
            )
        except StoreError as e:
            raise PersistenceError(f"Failed to save enrichment for {article.id}: {e}") from e
