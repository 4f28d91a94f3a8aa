"""Thin wrapper around the Anthropic Messages API.

Each call is attempted exactly once. Failures surface as LLMError so the
pipeline can fall back to local heuristics or fixed texts.
"""

import logging

from anthropic import APIError, AsyncAnthropic

from app.config import get_settings
from app.services.metrics import llm_calls_total

logger = logging.getLogger(__name__)
settings = get_settings()


class LLMError(Exception):
    """The language model could not produce a usable reply."""


class LLMClient:
    """Single-shot text completions."""

    def __init__(self, client: AsyncAnthropic | None = None):
        """Initialize Anthropic client."""
        self.client = client or AsyncAnthropic(api_key=settings.anthropic_api_key)

    async def complete(
        self,
        user_message: str,
        *,
        system: str | None = None,
        max_tokens: int,
        temperature: float,
        purpose: str,
    ) -> str:
        """
        Send one user message and return the reply text.

        Args:
            user_message: Content of the single user turn
            system: Optional system prompt
            max_tokens: Completion budget
            temperature: Sampling temperature
            purpose: Label used for logs and metrics (intent, needs_data, ...)

        Returns:
            Reply text, stripped

        Raises:
            LLMError: On API failure or an empty reply
        """
        kwargs = {
            "model": settings.llm_model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": user_message}],
        }
        if system:
            kwargs["system"] = system

        try:
            message = await self.client.messages.create(**kwargs)
        except APIError as e:
            llm_calls_total.labels(purpose, "error").inc()
            logger.warning("LLM call failed (purpose=%s): %s", purpose, e)
            raise LLMError(str(e)) from e

        text = "".join(
            block.text for block in message.content if getattr(block, "type", None) == "text"
        ).strip()
        if not text:
            llm_calls_total.labels(purpose, "empty").inc()
            raise LLMError(f"Empty reply for {purpose}")

        llm_calls_total.labels(purpose, "ok").inc()
        return text


# Singleton instance
llm_client = LLMClient()
