"""Data models for the Content Tailoring Engine.

Contains:
- TailoredBullet: a bullet with at most one injected term
- SummaryAttempt / SummaryRewriteResult: the summary rewrite trace
- CoverLetterBody: a generated cover letter body
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, Field


class SummaryState(str, Enum):
    """States of the summary rewrite state machine."""

    ATTEMPT = "attempt"
    SUCCESS = "success"
    FALLBACK_DETERMINISTIC = "fallback_deterministic"


class TailoredBullet(BaseModel):
    """A resume bullet after enhancement."""

    original: str = Field(..., description="Bullet text before enhancement")
    text: str = Field(..., description="Bullet text after enhancement")
    injected_term: str | None = Field(
        default=None, description="Term injected into the bullet, if any"
    )
    score: float | None = Field(
        default=None, description="Contextual score of the injected term"
    )
    insertion: str | None = Field(
        default=None, description="Insertion point used (list, phrase, verb, trailing)"
    )

    @property
    def changed(self) -> bool:
        return self.injected_term is not None


@dataclass
class SummaryAttempt:
    """One pass through the summary rewrite ladder."""

    mode: int
    temperature: float
    term_budget: int
    outcome: str
    detail: str | None = None


@dataclass
class SummaryRewriteResult:
    """Final state and trace of a summary rewrite."""

    text: str
    state: SummaryState
    attempts: list[SummaryAttempt] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state == SummaryState.SUCCESS


class CoverLetterBody(BaseModel):
    """Body paragraphs of a cover letter (no greeting, no signature)."""

    text: str = Field(..., description="Body paragraphs separated by blank lines")
    word_count: int = Field(..., ge=0, description="Word count of the body")

    @property
    def paragraphs(self) -> list[str]:
        return [p.strip() for p in self.text.split("\n\n") if p.strip()]
