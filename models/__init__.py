"""Data models for the article enrichment pipeline.

Article:
    Read-only source document (title, author, source, content, ...).

EnrichmentContent:
    The JSON object the model is asked to return (summary, enhanced_content).

EnrichmentResult:
    Capped summary/analysis pair ready for storage, AI-generated or fallback.

ItemOutcome / ItemStatus:
    Terminal state of one article in a batch.

BatchOutcome:
    Processed / skipped / failed buckets for a whole batch.

Example:
    >>> from models import Article, BatchOutcome, ItemOutcome
    >>> batch = BatchOutcome()
    >>> batch.add(ItemOutcome.skipped("a1", "already exists"))
"""

from models.article import Article
from models.enrichment import EnrichmentContent, EnrichmentResult
from models.outcome import (
    REASON_ALREADY_EXISTS,
    REASON_INSUFFICIENT_CONTENT,
    BatchOutcome,
    ItemOutcome,
    ItemStatus,
)

__all__ = [
    "Article",
    "EnrichmentContent",
    "EnrichmentResult",
    "BatchOutcome",
    "ItemOutcome",
    "ItemStatus",
    "REASON_ALREADY_EXISTS",
    "REASON_INSUFFICIENT_CONTENT",
]
