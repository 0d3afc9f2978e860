"""Enrichment models for AI output and persisted records.

Model Hierarchy:
    EnrichmentContent: The exact JSON object the model is asked to return
    EnrichmentResult: Capped summary/analysis pair ready for storage,
        produced either from EnrichmentContent or by fallback synthesis
"""

from pydantic import BaseModel, ConfigDict, Field


class EnrichmentContent(BaseModel):
    """Structured AI response.

    Both fields are required and must be non-empty strings after trimming.
    Extra keys in the model's output are ignored.
    """

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    summary: str = Field(min_length=1, description="2-3 sentence summary")
    enhanced_content: str = Field(min_length=1, description="Structured analysis")


class EnrichmentResult(BaseModel):
    """Summary/analysis pair written to the companion store.

    Attributes:
        summary: Summary text, capped before construction
        analysis: Analysis text, capped before construction
        is_fallback: True when built by fallback synthesis instead of the AI
        fallback_reason: Why the fallback was used (empty for AI output)
    """

    summary: str
    analysis: str
    is_fallback: bool = False
    fallback_reason: str = ""

    def __str__(self) -> str:
        """Human-readable representation for logging."""
        kind = "fallback" if self.is_fallback else "ai"
        return f"EnrichmentResult({kind}, summary={len(self.summary)} chars, analysis={len(self.analysis)} chars)"
