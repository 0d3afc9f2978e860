"""AI responder for chat-completion endpoints.

This module sends one prompt to an OpenAI-compatible chat-completion API
(OpenRouter by default) and returns the assistant's raw text.

Design:
    - One request per call, no internal retries (the client is built with
      max_retries=0); retry policy belongs to the caller
    - Explicit request timeout on every call
    - Every failure surfaces as AiServiceError, so callers handle a single
      exception type
"""

import logging

from openai import APIError, APIStatusError, AsyncOpenAI

from config import Config
from errors import AiServiceError

logger = logging.getLogger(__name__)


class AIResponder:
    """Issues chat-completion requests for article analysis.

    Example:
        >>> responder = AIResponder(config)
        >>> text = await responder.complete(prompt)
        >>> await responder.aclose()
    """

    def __init__(self, config: Config, client: AsyncOpenAI | None = None):
        """Initialize the responder.

        Args:
            config: Application configuration with endpoint and model settings
            client: Optional preconfigured client (used by tests)
        """
        self.config = config
        self._client = client or AsyncOpenAI(
            base_url=config.ai_api_base,
            api_key=config.ai_api_key,
            timeout=config.ai_timeout_seconds,
            max_retries=0,
        )

    def _request(self, prompt: str, max_tokens: int) -> dict:
        request = {
            "model": self.config.ai_model,
            "messages": [
                {"role": "system", "content": self.config.ai_system_prompt},
                {"role": "user", "content": prompt},
            ],
            "temperature": self.config.ai_temperature,
            "max_tokens": max_tokens,
        }
        if self.config.ai_json_mode:
            request["response_format"] = {"type": "json_object"}
        return request

    async def complete(self, prompt: str, max_tokens: int | None = None) -> str:
        """Send a prompt and return the raw completion text.

        Args:
            prompt: User-turn prompt
            max_tokens: Token ceiling (defaults to config.ai_max_tokens)

        Returns:
            Assistant message content, unaltered

        Raises:
            AiServiceError: On non-success status, transport failure, timeout,
                or a response without a completion
        """
        ceiling = max_tokens or self.config.ai_max_tokens
        try:
            response = await self._client.chat.completions.create(**self._request(prompt, ceiling))
        except APIStatusError as e:
            body = e.response.text if e.response is not None else str(e.body)
            logger.warning("AI API error | status=%d model=%s", e.status_code, self.config.ai_model)
            raise AiServiceError(
                f"AI API error: {e.status_code} - {body}",
                status_code=e.status_code,
                body=body,
            ) from e
        except APIError as e:
            logger.warning("AI API call failed | type=%s error=%s", type(e).__name__, e)
            raise AiServiceError(f"AI API call failed: {e}") from e

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            raise AiServiceError("AI API response missing completion choice") from e
        if content is None:
            raise AiServiceError("AI API response missing completion content")

        usage = getattr(response, "usage", None)
        logger.debug(
            "AI completion received | chars=%d prompt_tokens=%s completion_tokens=%s",
            len(content),
            getattr(usage, "prompt_tokens", "-"),
            getattr(usage, "completion_tokens", "-"),
        )
        return content

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.close()
