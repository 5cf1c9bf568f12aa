"""
Unified AI Client with Provider Fallback

Attempts providers in order: Anthropic → Grok → InferenceUnavailable
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from alphaclass.core.errors import InferenceUnavailable

logger = logging.getLogger(__name__)


class InferenceClient(Protocol):
    """Anything that can answer a user message given a system context."""

    async def generate(self, system_context: str, user_message: str) -> str: ...


class AIClient:
    """Unified AI client that tries multiple providers in order."""

    def __init__(
        self,
        *,
        anthropic_api_key: str | None = None,
        anthropic_model: str = "claude-3-5-haiku-latest",
        grok_api_key: str | None = None,
        grok_model: str = "grok-3",
        grok_base_url: str = "https://api.x.ai/v1",
        max_tokens: int = 1024,
        temperature: float = 0.7,
    ):
        """Initialize AI client with available API keys.

        Args:
            anthropic_api_key: Anthropic Claude API key (priority 1)
            anthropic_model: Claude model identifier
            grok_api_key: xAI Grok API key (priority 2)
            grok_model: Grok model identifier
            grok_base_url: xAI OpenAI-compatible endpoint
            max_tokens: Maximum response tokens
            temperature: Sampling temperature
        """
        self.anthropic_api_key = anthropic_api_key
        self.anthropic_model = anthropic_model
        self.grok_api_key = grok_api_key
        self.grok_model = grok_model
        self.grok_base_url = grok_base_url
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def generate(self, system_context: str, user_message: str) -> str:
        """Generate an assistant reply using the first provider that answers.

        Tries providers in order:
        1. Anthropic Claude API (if key available)
        2. xAI Grok API (if key available)

        Args:
            system_context: System prompt with the user's academic context
            user_message: The user's chat message

        Returns:
            Generated text response

        Raises:
            InferenceUnavailable: no provider configured or all providers failed
        """
        messages = [{"role": "user", "content": user_message}]

        if self.anthropic_api_key:
            result = await self._try_anthropic(system=system_context, messages=messages)
            if result is not None:
                logger.info("AI completion successful via Anthropic")
                return result

        if self.grok_api_key:
            result = await self._try_grok(system=system_context, messages=messages)
            if result is not None:
                logger.info("AI completion successful via Grok (fallback)")
                return result

        logger.warning("All AI providers failed or unavailable")
        raise InferenceUnavailable("The assistant is temporarily unavailable, please retry")

    async def _try_anthropic(self, *, system: str, messages: list[dict[str, str]]) -> str | None:
        """Try Anthropic Claude API.

        Returns:
            Generated text or None on error
        """
        try:
            from anthropic import AsyncAnthropic

            client = AsyncAnthropic(api_key=self.anthropic_api_key)

            response = await client.messages.create(
                model=self.anthropic_model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                system=system,
                messages=messages,  # type: ignore[arg-type]
            )

            if response.content and len(response.content) > 0:
                content_block = response.content[0]
                if hasattr(content_block, "text") and content_block.text:
                    return content_block.text

            logger.warning("Anthropic response had no text content")
            return None

        except Exception as e:
            logger.warning(f"Anthropic API error: {e}")
            return None

    async def _try_grok(self, *, system: str, messages: list[dict[str, str]]) -> str | None:
        """Try xAI Grok API (OpenAI-compatible).

        Returns:
            Generated text or None on error
        """
        try:
            from openai import AsyncOpenAI

            client = AsyncOpenAI(api_key=self.grok_api_key, base_url=self.grok_base_url)

            openai_messages: list[dict[str, Any]] = [{"role": "system", "content": system}]
            openai_messages.extend(messages)

            response = await client.chat.completions.create(
                model=self.grok_model,
                messages=openai_messages,  # type: ignore[arg-type]
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )

            if response.choices and response.choices[0].message.content:
                return response.choices[0].message.content

            logger.warning("Grok response had no content")
            return None

        except Exception as e:
            logger.warning(f"Grok API error: {e}")
            return None


def get_ai_client() -> InferenceClient:
    """Get configured AI client instance.

    Returns:
        AIClient with available API keys from settings
    """
    from alphaclass.config import settings

    return AIClient(
        anthropic_api_key=settings.ANTHROPIC_API_KEY or None,
        anthropic_model=settings.ANTHROPIC_MODEL,
        grok_api_key=settings.GROK_API_KEY or None,
        grok_model=settings.GROK_MODEL,
        grok_base_url=settings.GROK_BASE_URL,
        max_tokens=settings.AI_MAX_TOKENS,
        temperature=settings.AI_TEMPERATURE,
    )
