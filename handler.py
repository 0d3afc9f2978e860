"""Request handling for the enrichment trigger.

handle_request turns a raw request body into (status, response body):

    400  articleIds missing, not a list, empty, or holding non-string entries
    500  body is not valid JSON, or the store/AI client cannot be set up
    200  batch accepted; the report lists every article's outcome,
         however many of them failed

Request:
    {"articleIds": ["a1", "a2"]}

Response (200):
    {
        "success": true,
        "message": "Processed 2 articles",
        "results": {"processed": 1, "failed": 0, "skipped": 1, "details": [...]},
        "summary": {"total": 2, "processed": 1, "skipped": 1, "failed": 0},
        "timestamp": "2024-01-01T00:00:00+00:00"
    }
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any

from config import Config
from database import DocumentStore
from errors import RequestValidationError
from models.outcome import BatchOutcome
from pipeline import run_batch, validate_article_ids

logger = logging.getLogger(__name__)


def decode_body(body: str | bytes | dict | None) -> dict[str, Any]:
    """Decode a request body into a dict.

    An empty body decodes to an empty dict; a JSON value that is not an
    object also yields an empty dict (and so fails ID validation).

    Raises:
        ValueError: If the body is not valid JSON
    """
    if isinstance(body, dict):
        return body
    if isinstance(body, bytes):
        body = body.decode("utf-8")
    if not body or not body.strip():
        return {}
    payload = json.loads(body)
    return payload if isinstance(payload, dict) else {}


def build_response(batch: BatchOutcome) -> dict[str, Any]:
    """Render a finished batch as the trigger response body."""
    return {
        "success": True,
        "message": f"Processed {batch.total} articles",
        "results": batch.results_dict(),
        "summary": batch.summary_dict(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def error_response(message: str, error: str | None = None) -> dict[str, Any]:
    payload: dict[str, Any] = {"success": False, "message": message}
    if error is not None:
        payload["error"] = error
    return payload


async def handle_request(
    body: str | bytes | dict | None,
    config: Config,
    store: DocumentStore | None = None,
    responder: Any | None = None,
) -> tuple[int, dict[str, Any]]:
    """Handle one enrichment request.

    Args:
        body: Raw or already-decoded request body
        config: Application configuration
        store: Optional shared store (opened per request when omitted)
        responder: Optional shared AI responder (created per request when omitted)

    Returns:
        Tuple of (HTTP status code, response body)
    """
    try:
        payload = decode_body(body)
        article_ids = validate_article_ids(payload.get("articleIds"))
    except RequestValidationError as e:
        logger.warning("Request rejected | error=%s", e)
        return 400, error_response(str(e))
    except ValueError as e:
        logger.error("Request body is not valid JSON | error=%s", e)
        return 500, error_response("Invalid request body", str(e))

    logger.info("Processing %d articles for AI generation", len(article_ids))
    try:
        batch = await run_batch(config, article_ids, store=store, responder=responder)
    except Exception as e:
        logger.error("Function error | type=%s error=%s", type(e).__name__, e, exc_info=True)
        return 500, error_response("Enrichment failed", str(e))

    return 200, build_response(batch)
