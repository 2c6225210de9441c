"""
Engine Settings

Process-level settings read from the environment (and a .env file if present).
"""

import logging
import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from ..models import Lane
from .llm_providers import GeneratorConfiguration, LLMProvider, create_default_config_from_env

logger = logging.getLogger("nuance_engine.config")

_TRUE_VALUES = {"1", "true", "yes", "on"}
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class EngineSettings(BaseModel):
    """Settings for resolution strictness, logging and the repair generator."""
    default_lane: Lane = Lane.FEATURE_FILM
    strict_overrides: bool = False
    log_level: str = "INFO"

    generator_provider: LLMProvider = LLMProvider.OPENAI
    generator_model: str = "gpt-4o-mini"
    generator_temperature: float = Field(default=0.7, ge=0.0, le=2.0)

    allowed_origins: List[str] = Field(default_factory=lambda: ["*"])

    def generator_config(self) -> GeneratorConfiguration:
        """Provider keys from the environment plus the configured generator selection."""
        return create_default_config_from_env(
            provider=self.generator_provider,
            model=self.generator_model,
            temperature=self.generator_temperature,
        )


def _env_list(value: Optional[str]) -> Optional[List[str]]:
    if value is None:
        return None
    items = [item.strip() for item in value.split(",") if item.strip()]
    return items or None


def create_settings_from_env() -> EngineSettings:
    """
    Build EngineSettings from NUANCE_* environment variables.

    Invalid values are logged and replaced by their defaults.
    """
    load_dotenv()

    raw = {
        "default_lane": os.getenv("NUANCE_DEFAULT_LANE"),
        "strict_overrides": (
            os.getenv("NUANCE_STRICT_OVERRIDES", "").strip().lower() in _TRUE_VALUES
            if os.getenv("NUANCE_STRICT_OVERRIDES") is not None
            else None
        ),
        "log_level": (os.getenv("NUANCE_LOG_LEVEL") or "").upper() or None,
        "generator_provider": os.getenv("NUANCE_GENERATOR_PROVIDER"),
        "generator_model": os.getenv("NUANCE_GENERATOR_MODEL"),
        "generator_temperature": os.getenv("NUANCE_GENERATOR_TEMPERATURE"),
        "allowed_origins": _env_list(os.getenv("NUANCE_ALLOWED_ORIGINS")),
    }
    values = {key: value for key, value in raw.items() if value is not None}

    if values.get("log_level") and values["log_level"] not in _LOG_LEVELS:
        logger.warning(f"[create_settings_from_env] Unknown log level {values['log_level']}, using INFO")
        values.pop("log_level")

    try:
        return EngineSettings(**values)
    except ValidationError as e:
        for error in e.errors():
            field = error["loc"][0] if error["loc"] else None
            if field in values:
                logger.warning(
                    f"[create_settings_from_env] Ignoring invalid {field}={values[field]!r}: {error['msg']}"
                )
                values.pop(field)
        return EngineSettings(**values)
