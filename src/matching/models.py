"""Data models for the Term Matcher."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from src.extractor.models import Term


class MatchKind(str, Enum):
    """Tier at which a term was judged relevant to the target."""

    EXACT = "exact"
    LEXICAL = "lexical"
    SEMANTIC = "semantic"

    @property
    def priority(self) -> int:
        """Sort priority; lower sorts first."""
        return _PRIORITY[self]


_PRIORITY = {MatchKind.EXACT: 0, MatchKind.LEXICAL: 1, MatchKind.SEMANTIC: 2}


class Match(BaseModel):
    """A term judged relevant to the target job description."""

    model_config = ConfigDict(frozen=True)

    term: Term = Field(..., description="The matched term")
    kind: MatchKind = Field(..., description="Tier that accepted the match")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Match confidence")
    evidence: str | None = Field(
        default=None, description="What in the target supported the match"
    )

    @model_validator(mode="after")
    def exact_is_certain(self) -> Match:
        """Exact matches always carry full confidence."""
        if self.kind == MatchKind.EXACT and self.confidence != 1.0:
            raise ValueError("exact matches must have confidence 1.0")
        return self

    def sort_key(self) -> tuple[int, float]:
        """Key for ordering: exact before lexical before semantic, then confidence."""
        return (self.kind.priority, -self.confidence)


class SemanticJudgement(BaseModel):
    """The text-generation service's verdict on two phrases."""

    similar: bool = Field(..., description="Whether the phrases are interchangeable")
    confidence: float = Field(
        default=0.0, ge=0.0, le=1.0, description="Confidence in the verdict (0-1)"
    )
    explanation: str = Field(default="", description="Short justification")

    @field_validator("confidence", mode="before")
    @classmethod
    def scale_percentages(cls, v: object) -> object:
        """Accept confidences given as percentages (e.g. 85)."""
        if isinstance(v, (int, float)) and not isinstance(v, bool) and 1.0 < v <= 100.0:
            return v / 100.0
        return v


def sort_matches(matches: list[Match]) -> list[Match]:
    """Stable sort by match kind priority then descending confidence."""
    return sorted(matches, key=Match.sort_key)
