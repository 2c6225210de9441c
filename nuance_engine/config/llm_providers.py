"""
LLM Provider Configuration - BYOK (Bring Your Own Key) Support
Supports OpenAI, OpenRouter and Anthropic Claude for the regeneration call.
"""

import os
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, SecretStr


class LLMProvider(str, Enum):
    """Supported LLM providers."""
    OPENAI = "openai"
    OPENROUTER = "openrouter"
    CLAUDE = "claude"


# ============================================================================
# Provider Configurations
# ============================================================================

class ProviderConfig(BaseModel):
    """Base configuration for an LLM provider."""
    provider: LLMProvider
    api_key: SecretStr
    base_url: Optional[str] = None
    organization_id: Optional[str] = None
    default_model: str
    enabled: bool = True


class OpenAIConfig(ProviderConfig):
    """OpenAI-specific configuration."""
    provider: LLMProvider = LLMProvider.OPENAI
    base_url: str = "https://api.openai.com/v1"
    default_model: str = "gpt-4o-mini"


class OpenRouterConfig(ProviderConfig):
    """OpenRouter-specific configuration."""
    provider: LLMProvider = LLMProvider.OPENROUTER
    base_url: str = "https://openrouter.ai/api/v1"
    default_model: str = "anthropic/claude-3.5-sonnet"
    site_url: Optional[str] = None  # For OpenRouter rankings
    app_name: Optional[str] = "Nuance Engine"


class ClaudeConfig(ProviderConfig):
    """Anthropic Claude-specific configuration."""
    provider: LLMProvider = LLMProvider.CLAUDE
    base_url: str = "https://api.anthropic.com/v1"
    default_model: str = "claude-3-5-sonnet-20241022"


# ============================================================================
# Generator Configuration
# ============================================================================

class GeneratorConfiguration(BaseModel):
    """Provider keys plus the provider/model used for repair regeneration."""

    openai: Optional[OpenAIConfig] = None
    openrouter: Optional[OpenRouterConfig] = None
    claude: Optional[ClaudeConfig] = None

    provider: LLMProvider = LLMProvider.OPENAI
    model: Optional[str] = None
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)

    def get_provider_config(self, provider: Optional[LLMProvider] = None) -> Optional[ProviderConfig]:
        """Get configuration for a specific provider (the selected one by default)."""
        provider_map = {
            LLMProvider.OPENAI: self.openai,
            LLMProvider.OPENROUTER: self.openrouter,
            LLMProvider.CLAUDE: self.claude,
        }
        return provider_map.get(provider or self.provider)

    def get_enabled_providers(self) -> List[LLMProvider]:
        """Get list of enabled providers."""
        enabled = []
        for provider in LLMProvider:
            config = self.get_provider_config(provider)
            if config and config.enabled:
                enabled.append(provider)
        return enabled

    def resolved_model(self) -> Optional[str]:
        """Selected model, or the selected provider's default."""
        if self.model:
            return self.model
        config = self.get_provider_config()
        return config.default_model if config else None

    @property
    def is_configured(self) -> bool:
        config = self.get_provider_config()
        return config is not None and config.enabled


def create_default_config_from_env(
    provider: LLMProvider = LLMProvider.OPENAI,
    model: Optional[str] = None,
    temperature: float = 0.7,
) -> GeneratorConfiguration:
    """Create configuration from environment variables."""
    config = GeneratorConfiguration(provider=provider, model=model, temperature=temperature)

    # OpenAI
    if os.getenv("OPENAI_API_KEY"):
        config.openai = OpenAIConfig(
            api_key=SecretStr(os.getenv("OPENAI_API_KEY")),
            organization_id=os.getenv("OPENAI_ORG_ID"),
        )

    # OpenRouter
    if os.getenv("OPENROUTER_API_KEY"):
        config.openrouter = OpenRouterConfig(
            api_key=SecretStr(os.getenv("OPENROUTER_API_KEY")),
            site_url=os.getenv("OPENROUTER_SITE_URL"),
        )

    # Claude
    if os.getenv("ANTHROPIC_API_KEY"):
        config.claude = ClaudeConfig(
            api_key=SecretStr(os.getenv("ANTHROPIC_API_KEY")),
        )

    return config
