"""Per-item and per-batch outcome models.

Each article identifier in a batch ends in exactly one terminal state:

    success: a new enrichment record was written
    skipped: nothing to do (record already exists, or content too short)
    failed: the article could not be fetched or the record could not be written

BatchOutcome accumulates these in input order and renders the aggregate
report. It is process-local and never persisted.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ItemStatus(str, Enum):
    """Terminal state of one article in a batch."""

    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


# Skip reasons reported to callers
REASON_ALREADY_EXISTS = "already exists"
REASON_INSUFFICIENT_CONTENT = "insufficient content"


@dataclass
class ItemOutcome:
    """Result of enriching a single article identifier.

    Attributes:
        article_id: Identifier from the batch input
        status: Terminal state
        title: Article title (success only)
        document_id: Identifier of the new enrichment record (success only)
        is_fallback: Whether the stored content came from fallback synthesis
        reason: Skip reason (skipped only)
        error: Human-readable error message (failed only)
        stage: Step that failed: dedup, fetch, persist, or unexpected
    """

    article_id: str
    status: ItemStatus
    title: str | None = None
    document_id: str | None = None
    is_fallback: bool | None = None
    reason: str | None = None
    error: str | None = None
    stage: str | None = None

    @classmethod
    def success(
        cls,
        article_id: str,
        title: str,
        document_id: str,
        is_fallback: bool = False,
    ) -> "ItemOutcome":
        return cls(
            article_id=article_id,
            status=ItemStatus.SUCCESS,
            title=title,
            document_id=document_id,
            is_fallback=is_fallback,
        )

    @classmethod
    def skipped(cls, article_id: str, reason: str) -> "ItemOutcome":
        return cls(article_id=article_id, status=ItemStatus.SKIPPED, reason=reason)

    @classmethod
    def failed(cls, article_id: str, error: str, stage: str) -> "ItemOutcome":
        return cls(article_id=article_id, status=ItemStatus.FAILED, error=error, stage=stage)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a response detail entry, omitting unset fields."""
        data: dict[str, Any] = {"article_id": self.article_id, "status": self.status.value}
        for key in ("title", "document_id", "is_fallback", "reason", "error", "stage"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        return data


@dataclass
class BatchOutcome:
    """Aggregate of one batch run.

    The three buckets are disjoint; `details` keeps every outcome in the
    order the identifiers were processed.
    """

    batch_id: str = ""
    processed: list[ItemOutcome] = field(default_factory=list)
    skipped: list[ItemOutcome] = field(default_factory=list)
    failed: list[ItemOutcome] = field(default_factory=list)
    details: list[ItemOutcome] = field(default_factory=list)
    started_at: float = field(default_factory=time.time)
    duration: float = 0.0

    def add(self, outcome: ItemOutcome) -> None:
        """Record one terminal outcome in its bucket."""
        if outcome.status is ItemStatus.SUCCESS:
            self.processed.append(outcome)
        elif outcome.status is ItemStatus.SKIPPED:
            self.skipped.append(outcome)
        else:
            self.failed.append(outcome)
        self.details.append(outcome)

    def finish(self) -> None:
        """Stamp the run duration."""
        self.duration = time.time() - self.started_at

    @property
    def total(self) -> int:
        return len(self.details)

    @property
    def fallbacks(self) -> int:
        """Processed items whose content came from fallback synthesis."""
        return sum(1 for o in self.processed if o.is_fallback)

    def results_dict(self) -> dict[str, Any]:
        """Render the `results` section of the response."""
        return {
            "processed": len(self.processed),
            "failed": len(self.failed),
            "skipped": len(self.skipped),
            "details": [o.to_dict() for o in self.details],
        }

    def summary_dict(self) -> dict[str, int]:
        """Render the `summary` section of the response."""
        return {
            "total": self.total,
            "processed": len(self.processed),
            "skipped": len(self.skipped),
            "failed": len(self.failed),
        }
