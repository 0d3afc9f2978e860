"""Response parsing with deterministic fallback synthesis.

The model is asked for a bare JSON object, but real responses often arrive
wrapped in prose or markdown fences, or with trailing commas. Parsing tries,
in order:

    1. The full text as JSON
    2. The span from the first '{' to the last '}'
    3. That span with trailing commas removed

If none yields an object with non-empty `summary` and `enhanced_content`
strings, or if the AI call itself failed, a fallback result is synthesized
from the article's own fields. parse_response never raises.
"""

import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from errors import ParseError
from models.article import Article
from models.enrichment import EnrichmentContent, EnrichmentResult

logger = logging.getLogger(__name__)

SUMMARY_MAX_CHARS = 1000
ANALYSIS_MAX_CHARS = 5000
FALLBACK_SUMMARY_WORDS = 50

_TRAILING_COMMA = re.compile(r",\s*([}\]])")
_ELLIPSIS = "..."


def cap_text(text: str, limit: int) -> str:
    """Trim text and cut it to at most `limit` characters.

    Truncated text ends with an ellipsis that counts toward the limit.
    """
    text = text.strip()
    if len(text) <= limit:
        return text
    if limit <= len(_ELLIPSIS):
        return text[:limit]
    return text[: limit - len(_ELLIPSIS)].rstrip() + _ELLIPSIS


def _load_object(payload: str) -> dict[str, Any] | None:
    try:
        obj = json.loads(payload)
    except ValueError:
        return None
    return obj if isinstance(obj, dict) else None


def extract_json_object(text: str) -> dict[str, Any]:
    """Extract the first JSON object from model output.

    Args:
        text: Raw completion text

    Returns:
        Parsed JSON object

    Raises:
        ParseError: If no JSON object can be recovered
    """
    if not text or not text.strip():
        raise ParseError("Empty response")

    parsed = _load_object(text.strip())
    if parsed is not None:
        return parsed

    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        raise ParseError("No JSON object found in response")

    candidate = text[start : end + 1]
    parsed = _load_object(candidate)
    if parsed is not None:
        return parsed

    parsed = _load_object(_TRAILING_COMMA.sub(r"\1", candidate))
    if parsed is not None:
        return parsed

    raise ParseError("Response contains malformed JSON")


def parse_enrichment(text: str) -> EnrichmentContent:
    """Parse and validate the structured summary/analysis pair.

    Raises:
        ParseError: If the text has no object or a required field is missing/empty
    """
    data = extract_json_object(text)
    try:
        return EnrichmentContent.model_validate(data)
    except ValidationError as e:
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
        raise ParseError(f"Invalid or missing fields: {', '.join(fields) or 'unknown'}") from e


def fallback_summary(article: Article, max_words: int = FALLBACK_SUMMARY_WORDS) -> str:
    """Build a summary from the article's leading words."""
    words = article.content.split()
    if not words:
        return f"{article.title}."
    if len(words) <= max_words:
        return " ".join(words)
    return " ".join(words[:max_words]) + _ELLIPSIS


def fallback_analysis(article: Article) -> str:
    """Build a templated, non-AI description of the article."""
    published = article.published_date or "an unknown date"
    parts = [
        f'This article from {article.source}, titled "{article.title}", '
        f"was published on {published} by {article.author}."
    ]
    if article.url:
        parts.append(f"The original article is available at {article.url}.")
    parts.append(
        "Automated analysis was unavailable, so this overview was generated "
        "from the article's own details."
    )
    return " ".join(parts)


def fallback_enrichment(
    article: Article,
    reason: str,
    *,
    summary_max_chars: int = SUMMARY_MAX_CHARS,
    analysis_max_chars: int = ANALYSIS_MAX_CHARS,
    max_words: int = FALLBACK_SUMMARY_WORDS,
) -> EnrichmentResult:
    """Synthesize an enrichment result without the AI.

    Args:
        article: Source article (the only input to the synthesized text)
        reason: Why the fallback is used, kept for logging and reporting
        summary_max_chars: Summary cap
        analysis_max_chars: Analysis cap
        max_words: Word budget of the summary

    Returns:
        EnrichmentResult with is_fallback=True
    """
    logger.info("Using fallback content | article_id=%s reason=%s", article.id, reason)
    return EnrichmentResult(
        summary=cap_text(fallback_summary(article, max_words), summary_max_chars),
        analysis=cap_text(fallback_analysis(article), analysis_max_chars),
        is_fallback=True,
        fallback_reason=reason,
    )


def parse_response(
    text: str | None,
    article: Article,
    *,
    summary_max_chars: int = SUMMARY_MAX_CHARS,
    analysis_max_chars: int = ANALYSIS_MAX_CHARS,
    max_words: int = FALLBACK_SUMMARY_WORDS,
) -> EnrichmentResult:
    """Turn raw model output into a stored-ready result, falling back on failure.

    Args:
        text: Raw completion text, or None when the AI call failed
        article: Source article, used for fallback material
        summary_max_chars: Summary cap
        analysis_max_chars: Analysis cap
        max_words: Word budget of a fallback summary

    Returns:
        EnrichmentResult, always populated
    """
    limits = {
        "summary_max_chars": summary_max_chars,
        "analysis_max_chars": analysis_max_chars,
        "max_words": max_words,
    }
    if text is None:
        return fallback_enrichment(article, "no AI response", **limits)

    try:
        content = parse_enrichment(text)
    except ParseError as e:
        snippet = re.sub(r"\s+", " ", text)[:160]
        logger.warning("AI response not parseable | article_id=%s error=%s snippet=%s", article.id, e, snippet)
        return fallback_enrichment(article, f"parse error: {e}", **limits)

    return EnrichmentResult(
        summary=cap_text(content.summary, summary_max_chars),
        analysis=cap_text(content.enhanced_content, analysis_max_chars),
    )
