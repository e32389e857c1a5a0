"""Configuration settings for the shared text-generation client.

Every stage that talks to the external text-generation service (job field
extraction, semantic matching, summary rewrite, section fill, cover letter)
shares one LLMConfig.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMConfig(BaseSettings):
    """Configuration for the text-generation client.

    Settings can be overridden via environment variables prefixed with LLM_.

    Example: LLM_PROVIDER=anthropic LLM_MODEL=claude-sonnet-4-20250514
    """

    model_config = SettingsConfigDict(
        env_prefix="LLM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    provider: str = Field(
        default="deepseek",
        description="LLM provider (deepseek, openai, anthropic, azure, etc.)",
    )
    model: str = Field(
        default="deepseek-chat",
        description="LLM model name",
    )
    api_key: str | None = Field(
        default=None,
        description="API key for LLM provider",
    )
    base_url: str | None = Field(
        default=None,
        description="Base URL for OpenAI-compatible endpoints",
    )
    max_retries: Annotated[int, Field(ge=0)] = Field(
        default=1,
        description="Maximum retry attempts for transient LLM failures",
    )
    timeout: Annotated[float, Field(gt=0)] = Field(
        default=60.0,
        description="Timeout in seconds for a single LLM call",
    )
    temperature: Annotated[float, Field(ge=0.0, le=2.0)] = Field(
        default=0.3,
        description="Default sampling temperature",
    )
    repair_temperature: Annotated[float, Field(ge=0.0, le=2.0)] = Field(
        default=0.1,
        description="Temperature for the malformed-JSON repair round-trip",
    )

    @field_validator("provider", mode="before")
    @classmethod
    def normalize_provider(cls, v: str) -> str:
        """Lower-case the provider name."""
        if not isinstance(v, str) or not v.strip():
            raise ValueError("provider must be a non-empty string")
        return v.strip().lower()


# Singleton instance
_llm_config: LLMConfig | None = None


def get_llm_config() -> LLMConfig:
    """Get the LLM configuration singleton."""
    global _llm_config
    if _llm_config is None:
        _llm_config = LLMConfig()
    return _llm_config


def reset_llm_config() -> None:
    """Reset the configuration singleton (useful for testing)."""
    global _llm_config
    _llm_config = None
