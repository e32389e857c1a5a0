"""Configuration settings for the Term Matcher."""

from __future__ import annotations

from typing import Annotated

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class MatchingConfig(BaseSettings):
    """Term matching configuration settings.

    All settings have sensible defaults and can be overridden via
    environment variables with `MATCHING_` prefix or a .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="MATCHING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Lexical tier
    lexical_threshold: Annotated[float, Field(ge=0.0, le=1.0)] = Field(
        default=0.5,
        description="Token overlap ratio a lexical match must exceed",
    )
    min_token_length: Annotated[int, Field(ge=1)] = Field(
        default=3,
        description="Shortest token counted for lexical overlap",
    )

    # Semantic tier
    semantic_enabled: bool = Field(
        default=True,
        description="Ask the text-generation service when cheaper tiers fail",
    )
    semantic_accept_threshold: Annotated[float, Field(ge=0.0, le=1.0)] = Field(
        default=0.6,
        description="Confidence a semantic judgement must exceed to be accepted",
    )
    semantic_stop_threshold: Annotated[float, Field(ge=0.0, le=1.0)] = Field(
        default=0.85,
        description="Confidence above which remaining candidates are skipped",
    )
    max_semantic_candidates: Annotated[int, Field(ge=1)] = Field(
        default=5,
        description="Maximum candidate phrases judged per term",
    )
    semantic_timeout: Annotated[float, Field(gt=0)] = Field(
        default=30.0,
        description="Timeout in seconds for one semantic judgement",
    )
    semantic_temperature: Annotated[float, Field(ge=0.0, le=2.0)] = Field(
        default=0.1,
        description="Sampling temperature for semantic judgements",
    )

    # Concurrency
    max_workers: Annotated[int, Field(ge=1)] = Field(
        default=4,
        description="Maximum terms matched concurrently",
    )

    @model_validator(mode="after")
    def validate_thresholds(self) -> MatchingConfig:
        """Early-stop confidence must not be below the acceptance confidence."""
        if self.semantic_stop_threshold < self.semantic_accept_threshold:
            raise ValueError(
                "semantic_stop_threshold must be >= semantic_accept_threshold"
            )
        return self


# Singleton instance
_matching_config: MatchingConfig | None = None


def get_matching_config() -> MatchingConfig:
    """Get the matching configuration singleton."""
    global _matching_config
    if _matching_config is None:
        _matching_config = MatchingConfig()
    return _matching_config


def reset_matching_config() -> None:
    """Reset the configuration singleton (useful for testing)."""
    global _matching_config
    _matching_config = None
