"""Data models and errors for the Import/Repair Client."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class RepairPatch(BaseModel):
    """A schema fix derived from one validation issue.

    Attributes:
        path: Path of the offending value inside the submitted document.
        expected_type: "string", "number", "boolean", "object", "array" or "enum".
        error_code: The renderer's issue code (invalid_type, too_small, ...).
        message: The renderer's message, for diagnostics.
        minimum: Minimum string length for too_small issues.
        allowed_values: Allowed values for enum issues.
    """

    path: list[str | int] = Field(..., min_length=1)
    expected_type: str = Field(..., description="Expected JSON type or 'enum'")
    error_code: str = Field(default="invalid_type")
    message: str = Field(default="")
    minimum: int | None = Field(default=None)
    allowed_values: list[Any] = Field(default_factory=list)

    @property
    def dotted_path(self) -> str:
        return ".".join(str(p) for p in self.path)


@dataclass
class ImportResult:
    """Outcome of a successful import."""

    resume_id: str
    submissions: int
    patches: list[RepairPatch] = field(default_factory=list)
    payload: dict | None = None
    completed_at: datetime = field(default_factory=datetime.now)

    @property
    def repaired(self) -> bool:
        return bool(self.patches)


class RendererError(Exception):
    """Rendering service failure (network, timeout or non-2xx response)."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class RendererValidationError(RendererError):
    """Validation failure that the repair round did not fix."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
        issues: list[RepairPatch] | None = None,
    ):
        super().__init__(message, status_code=status_code, body=body)
        self.issues = issues or []
