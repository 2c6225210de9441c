"""
Nuance Engine Services Module
LLM clients and the text generator port used for repair regeneration.
"""

from .llm_clients import ClaudeClient, LLMClient, OpenAIClient, create_llm_client
from .text_generator import LLMTextGenerator, TextGenerator

__all__ = [
    "LLMClient",
    "OpenAIClient",
    "ClaudeClient",
    "create_llm_client",
    "TextGenerator",
    "LLMTextGenerator",
]
