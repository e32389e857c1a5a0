"""Configuration settings for the rendering service client."""

from __future__ import annotations

from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RendererConfig(BaseSettings):
    """Configuration for the external document-rendering service.

    Settings can be overridden via environment variables prefixed with RENDERER_.

    Example: RENDERER_BASE_URL=https://resume.example.com
    """

    model_config = SettingsConfigDict(
        env_prefix="RENDERER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    base_url: str = Field(
        default="",
        description="Base URL of the rendering service",
    )
    api_key: str | None = Field(
        default=None,
        description="API key, sent as the x-api-key header",
    )
    timeout: Annotated[float, Field(gt=0)] = Field(
        default=60.0,
        description="Per-request timeout in seconds",
    )
    import_path: str = Field(
        default="/api/openapi/resume/import",
        description="Path of the resume import endpoint",
    )
    pdf_path: str = Field(
        default="/api/openapi/printer/resume/{resume_id}/pdf",
        description="Path template of the PDF export endpoint",
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the base URL."""
        return v.strip().rstrip("/")

    @property
    def configured(self) -> bool:
        """Whether both the base URL and the API key are set."""
        return bool(self.base_url and self.api_key)


# Singleton instance
_renderer_config: RendererConfig | None = None


def get_renderer_config() -> RendererConfig:
    """Get the renderer configuration singleton."""
    global _renderer_config
    if _renderer_config is None:
        _renderer_config = RendererConfig()
    return _renderer_config


def reset_renderer_config() -> None:
    """Reset the configuration singleton (useful for testing)."""
    global _renderer_config
    _renderer_config = None
