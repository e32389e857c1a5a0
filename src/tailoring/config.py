"""Configuration settings for the Content Tailoring Engine."""

from __future__ import annotations

from typing import Annotated

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class TailoringConfig(BaseSettings):
    """Configuration for summary rewriting, bullet enhancement and cover letters.

    Settings can be overridden via environment variables prefixed with TAILORING_.

    Example: TAILORING_TERM_USAGE_CAP=2
    """

    model_config = SettingsConfigDict(
        env_prefix="TAILORING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Summary rewrite ladder; one entry per attempt (mode 0..n-1)
    summary_attempt_temperatures: list[float] = Field(
        default=[0.3, 0.45, 0.6, 0.75],
        description="Sampling temperature for each summary attempt",
    )
    summary_term_budgets: list[int] = Field(
        default=[3, 5, 8, 12],
        description="Number of target terms requested in each summary attempt",
    )
    summary_min_lines: Annotated[int, Field(ge=1)] = Field(
        default=2,
        description="Minimum lines (or sentences) a rewritten summary must have",
    )
    summary_copy_min_chars: Annotated[int, Field(ge=1)] = Field(
        default=20,
        description="Original sentences at least this long may not be copied verbatim",
    )
    summary_fallback_terms: Annotated[int, Field(ge=1)] = Field(
        default=6,
        description="Overlap terms used by the deterministic fallback summary",
    )
    target_excerpt_chars: Annotated[int, Field(gt=0)] = Field(
        default=8000,
        description="Job description characters included in prompts",
    )

    # Bullet enhancement
    bullet_acceptance_threshold: Annotated[float, Field(ge=0.0)] = Field(
        default=0.45,
        description="Minimum contextual score for injecting a term into a bullet",
    )
    term_usage_cap: Annotated[int, Field(ge=1)] = Field(
        default=1,
        description="Maximum bullets a single term may be injected into per run",
    )
    usage_penalty: Annotated[float, Field(ge=0.0)] = Field(
        default=0.5,
        description="Score penalty per previous injection of the same term",
    )
    overlap_weight: Annotated[float, Field(ge=0.0)] = Field(
        default=0.35,
        description="Weight of bullet/term token overlap in the contextual score",
    )
    confidence_weight: Annotated[float, Field(ge=0.0)] = Field(
        default=0.4,
        description="Weight of match confidence in the contextual score",
    )

    # Cover letter generation settings
    cover_letter_min_words: Annotated[int, Field(gt=0)] = Field(
        default=220,
        description="Minimum word count for cover letter bodies",
    )
    cover_letter_max_words: Annotated[int, Field(gt=0)] = Field(
        default=350,
        description="Maximum word count for cover letter bodies",
    )
    cover_letter_temperature: Annotated[float, Field(ge=0.0, le=2.0)] = Field(
        default=0.28,
        description="Sampling temperature for cover letter bodies",
    )

    @model_validator(mode="after")
    def validate_summary_ladder(self) -> TailoringConfig:
        """Temperatures and term budgets describe the same attempts."""
        if not self.summary_attempt_temperatures:
            raise ValueError("summary_attempt_temperatures must not be empty")
        if len(self.summary_attempt_temperatures) != len(self.summary_term_budgets):
            raise ValueError(
                "summary_attempt_temperatures and summary_term_budgets must have "
                "the same length"
            )
        if self.cover_letter_min_words > self.cover_letter_max_words:
            raise ValueError("cover_letter_min_words must not exceed cover_letter_max_words")
        return self

    @property
    def summary_max_attempts(self) -> int:
        return len(self.summary_attempt_temperatures)


# Singleton instance
_tailoring_config: TailoringConfig | None = None


def get_tailoring_config() -> TailoringConfig:
    """Get the tailoring configuration singleton."""
    global _tailoring_config
    if _tailoring_config is None:
        _tailoring_config = TailoringConfig()
    return _tailoring_config


def reset_tailoring_config() -> None:
    """Reset the configuration singleton (useful for testing)."""
    global _tailoring_config
    _tailoring_config = None
