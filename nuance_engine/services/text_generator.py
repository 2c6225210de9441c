"""
Text Generator Port

The gate never writes narrative text itself. Between attempts it hands the
original prompt context and a repair instruction to a TextGenerator and
evaluates whatever text comes back.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from ..models import EngineProfile
from ..prompts.nuance import build_nuance_prompt_block
from .llm_clients import LLMClient

logger = logging.getLogger("nuance_engine.generator")

REPAIR_SYSTEM_PROMPT = """You are revising a narrative draft that failed an editorial quality gate.
Rewrite the draft so it satisfies the repair directives below while keeping its premise, characters and setting.
Return only the revised narrative text, with no commentary."""

REPAIR_USER_PROMPT_TEMPLATE = """## Original Request
{prompt_context}

## Repair Directives
{repair_instruction}
"""


class TextGenerator(ABC):
    """External collaborator that produces regenerated text."""

    @abstractmethod
    async def regenerate(self, prompt_context: str, repair_instruction: str) -> str:
        """Regenerate text for the original context, following the repair instruction."""
        pass


class LLMTextGenerator(TextGenerator):
    """TextGenerator backed by an LLMClient."""

    def __init__(
        self,
        llm_client: LLMClient,
        profile: Optional[EngineProfile] = None,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ):
        self.llm_client = llm_client
        self.profile = profile
        self.temperature = temperature
        self.max_tokens = max_tokens

    def build_system_prompt(self) -> str:
        if self.profile is None:
            return REPAIR_SYSTEM_PROMPT
        return f"{REPAIR_SYSTEM_PROMPT}\n\n{build_nuance_prompt_block(self.profile)}"

    def build_user_prompt(self, prompt_context: str, repair_instruction: str) -> str:
        return REPAIR_USER_PROMPT_TEMPLATE.format(
            prompt_context=prompt_context,
            repair_instruction=repair_instruction,
        )

    async def regenerate(self, prompt_context: str, repair_instruction: str) -> str:
        logger.info(
            f"[LLMTextGenerator.regenerate] Requesting repair regeneration "
            f"({len(repair_instruction)} chars of directives)"
        )
        text = await self.llm_client.generate(
            system_prompt=self.build_system_prompt(),
            user_prompt=self.build_user_prompt(prompt_context, repair_instruction),
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        return text or ""
