"""AI-side components of the enrichment pipeline.

build_prompt:
    Renders an article into one analysis prompt with a mandated JSON shape.

AIResponder:
    Sends the prompt to an OpenAI-compatible chat-completion endpoint and
    returns raw text, raising AiServiceError on any failure.

parse_response / fallback_enrichment:
    Extract the summary/analysis pair from raw text, or synthesize a
    deterministic non-AI result when that is impossible.

Example:
    >>> from agents import AIResponder, build_prompt, parse_response
    >>> raw = await AIResponder(config).complete(build_prompt(article))
    >>> result = parse_response(raw, article)
"""

from agents.prompt import build_prompt
from agents.responder import AIResponder
from agents.parser import fallback_enrichment, parse_response

__all__ = [
    "AIResponder",
    "build_prompt",
    "fallback_enrichment",
    "parse_response",
]
