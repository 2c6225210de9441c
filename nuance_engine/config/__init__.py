"""
Nuance Engine Configuration Module
LLM provider configuration and engine settings.
"""

from .llm_providers import (
    ClaudeConfig,
    GeneratorConfiguration,
    # Enums
    LLMProvider,
    OpenAIConfig,
    OpenRouterConfig,
    # Configuration Models
    ProviderConfig,
    # Helper Functions
    create_default_config_from_env,
)
from .settings import EngineSettings, create_settings_from_env

__all__ = [
    "LLMProvider",
    "ProviderConfig",
    "OpenAIConfig",
    "OpenRouterConfig",
    "ClaudeConfig",
    "GeneratorConfiguration",
    "create_default_config_from_env",
    "EngineSettings",
    "create_settings_from_env",
]
