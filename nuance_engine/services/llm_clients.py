"""
LLM Client Implementations for the Nuance Engine
Thin async clients used by the repair regeneration step. A repair rewrites a
whole scene, so clients default to a rewrite-sized completion budget and
flag responses cut off by it.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional

from ..config import GeneratorConfiguration, LLMProvider

logger = logging.getLogger("nuance_engine.llm_clients")

# Completion budget for one rewritten scene
REWRITE_MAX_TOKENS = 4096


def join_text_blocks(blocks: Optional[Iterable[Any]]) -> str:
    """Concatenate the text parts of a content block list, ignoring other block types."""
    parts = [getattr(block, "text", None) for block in blocks or ()]
    return "".join(part for part in parts if part).strip()


class LLMClient(ABC):
    """Abstract base class for LLM clients."""

    @abstractmethod
    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> str:
        """Generate a rewritten text; never returns None."""
        pass


class OpenAIClient(LLMClient):
    """OpenAI API client implementation (also serves OpenAI-compatible APIs)."""

    def __init__(self, api_key: str, model: str, base_url: str = "https://api.openai.com/v1"):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self._client = None

    async def _get_client(self):
        if self._client is None:
            from openai import AsyncOpenAI
            self._client = AsyncOpenAI(api_key=self.api_key, base_url=self.base_url)
        return self._client

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> str:
        client = await self._get_client()
        response = await client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=temperature,
            max_tokens=max_tokens or REWRITE_MAX_TOKENS,
        )
        if not response.choices:
            logger.warning(f"[OpenAIClient.generate] {self.model} returned no choices")
            return ""
        choice = response.choices[0]
        if choice.finish_reason == "length":
            logger.warning(f"[OpenAIClient.generate] Rewrite from {self.model} truncated at the token limit")
        return (choice.message.content or "").strip()


class ClaudeClient(LLMClient):
    """Anthropic Claude API client implementation."""

    def __init__(self, api_key: str, model: str):
        self.api_key = api_key
        self.model = model
        self._client = None

    async def _get_client(self):
        if self._client is None:
            from anthropic import AsyncAnthropic
            self._client = AsyncAnthropic(api_key=self.api_key)
        return self._client

    async def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> str:
        client = await self._get_client()
        response = await client.messages.create(
            model=self.model,
            max_tokens=max_tokens or REWRITE_MAX_TOKENS,
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
            temperature=temperature,
        )
        if response.stop_reason == "max_tokens":
            logger.warning(f"[ClaudeClient.generate] Rewrite from {self.model} truncated at the token limit")
        return join_text_blocks(response.content)


def create_llm_client(
    config: GeneratorConfiguration,
    provider: Optional[LLMProvider] = None,
    model: Optional[str] = None,
) -> LLMClient:
    """Factory function to create appropriate LLM client."""
    provider = provider or config.provider
    model = model or config.model

    if provider == LLMProvider.OPENAI:
        if not config.openai:
            raise ValueError("OpenAI configuration not provided")
        return OpenAIClient(
            api_key=config.openai.api_key.get_secret_value(),
            model=model or config.openai.default_model,
            base_url=config.openai.base_url,
        )

    elif provider == LLMProvider.OPENROUTER:
        if not config.openrouter:
            raise ValueError("OpenRouter configuration not provided")
        return OpenAIClient(  # OpenRouter uses OpenAI-compatible API
            api_key=config.openrouter.api_key.get_secret_value(),
            model=model or config.openrouter.default_model,
            base_url=config.openrouter.base_url,
        )

    elif provider == LLMProvider.CLAUDE:
        if not config.claude:
            raise ValueError("Claude configuration not provided")
        return ClaudeClient(
            api_key=config.claude.api_key.get_secret_value(),
            model=model or config.claude.default_model,
        )

    else:
        raise ValueError(f"Unsupported provider: {provider}")
