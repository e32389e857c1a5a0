"""Configuration settings for the Document Normalizer."""

from __future__ import annotations

from typing import Annotated

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class NormalizerConfig(BaseSettings):
    """Document normalization settings.

    All settings have sensible defaults and can be overridden via
    environment variables with `NORMALIZER_` prefix or a .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="NORMALIZER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Summary line estimate
    sidebar_chars_per_line: Annotated[int, Field(gt=0)] = Field(
        default=40,
        description="Characters per rendered line when a sidebar is present",
    )
    full_width_chars_per_line: Annotated[int, Field(gt=0)] = Field(
        default=70,
        description="Characters per rendered line without a sidebar",
    )
    max_summary_lines_page1: Annotated[int, Field(gt=0)] = Field(
        default=14,
        description="Estimated summary lines that still leave room on page 1",
    )

    # Sidebar constraints
    max_skill_keywords: Annotated[int, Field(gt=0)] = Field(
        default=6,
        description="Maximum keywords per skill when skills sit in the sidebar",
    )
    max_keyword_chars: Annotated[int, Field(gt=3)] = Field(
        default=40,
        description="Longest skill name or keyword before truncation",
    )

    # Page policy
    min_margin: Annotated[int, Field(ge=0)] = Field(
        default=30, description="Margins below this are reset to default_margin"
    )
    default_margin: Annotated[int, Field(ge=0)] = Field(
        default=36, description="Page margin (X and Y)"
    )
    min_gap_x: Annotated[int, Field(ge=0)] = Field(
        default=24, description="Column gaps below this are reset to default_gap_x"
    )
    default_gap_x: Annotated[int, Field(ge=0)] = Field(
        default=32, description="Column gap"
    )
    gap_y_range: tuple[int, int] = Field(
        default=(6, 14), description="Allowed vertical gap range"
    )


# Singleton instance
_normalizer_config: NormalizerConfig | None = None


def get_normalizer_config() -> NormalizerConfig:
    """Get the normalizer configuration singleton."""
    global _normalizer_config
    if _normalizer_config is None:
        _normalizer_config = NormalizerConfig()
    return _normalizer_config


def reset_normalizer_config() -> None:
    """Reset the configuration singleton (useful for testing)."""
    global _normalizer_config
    _normalizer_config = None
