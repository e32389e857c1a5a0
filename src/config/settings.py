"""Configuration settings for the job-fit pipeline."""

from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings have sensible defaults and can be overridden via
    environment variables or a .env file. Stage-specific settings live in
    each stage's own config module (LLM_, MATCHING_, TAILORING_,
    NORMALIZER_, RENDERER_ prefixes).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Paths
    output_dir: Path = Field(
        default=Path("./artifacts"),
        description="Directory for CLI run outputs",
    )

    # Input limits
    max_source_chars: Annotated[int, Field(gt=0)] = Field(
        default=50000,
        description="Maximum accepted length of source or job text",
    )
    min_source_chars: Annotated[int, Field(ge=1)] = Field(
        default=1,
        description="Minimum accepted length of source text (after stripping)",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a known level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()

    @field_validator("output_dir", mode="before")
    @classmethod
    def convert_to_path(cls, v: str | Path) -> Path:
        """Convert string paths to Path objects."""
        if isinstance(v, str):
            return Path(v)
        return v

    @model_validator(mode="after")
    def validate_source_limits(self) -> "Settings":
        """Ensure the minimum source length does not exceed the maximum."""
        if self.min_source_chars > self.max_source_chars:
            raise ValueError("min_source_chars must not exceed max_source_chars")
        return self


# Singleton instance for easy import
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the application settings singleton."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset the settings singleton (useful for testing)."""
    global _settings
    _settings = None
