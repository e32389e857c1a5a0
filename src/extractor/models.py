"""Data models for the Term Extractor."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_KSAS = 25


class TermCategory(str, Enum):
    """Category of an extracted terminology candidate."""

    SYSTEMS = "systems"
    PROCESSES = "processes"
    TECHNOLOGIES = "technologies"
    CERTIFICATIONS = "certifications"
    DOMAIN = "domain"


class Term(BaseModel):
    """A terminology candidate extracted from free text.

    Terms are immutable once created. Two terms with the same text in
    different casing share a ``key`` and are treated as the same term.

    Attributes:
        text: Display text, in the first-seen original casing.
        category: The pattern family that produced the term.
    """

    model_config = ConfigDict(frozen=True)

    text: str = Field(..., min_length=1, description="Display text of the term")
    category: TermCategory = Field(..., description="Term category")

    @property
    def key(self) -> str:
        """Case-insensitive identity of the term."""
        return self.text.lower()


class TargetJob(BaseModel):
    """A target job posting to tailor against.

    Attributes:
        description: Full job posting text.
        title: Job title, if known.
        company: Hiring company, if known.
        terms: Optional pre-extracted term list used to widen matching.
    """

    description: str = Field(..., description="Job posting text")
    title: str | None = Field(default=None, description="Job title")
    company: str | None = Field(default=None, description="Hiring company")
    terms: list[str] = Field(
        default_factory=list, description="Pre-extracted terms from the posting"
    )

    @field_validator("terms", mode="before")
    @classmethod
    def clean_terms(cls, v: list[str] | None) -> list[str]:
        """Drop blank entries and surrounding whitespace."""
        if not v:
            return []
        return [str(item).strip() for item in v if str(item).strip()]


class JobFields(BaseModel):
    """Fields the text-generation service extracts from a job posting."""

    title: str = Field(default="", description="Job title")
    company: str = Field(default="", description="Hiring company")
    ksas: list[str] = Field(
        default_factory=list,
        description="Knowledge, skill and ability terms (at most 25)",
    )
    acronyms: list[str] = Field(
        default_factory=list, description="Acronyms used in the posting"
    )

    @field_validator("title", "company", mode="before")
    @classmethod
    def coerce_text(cls, v: object) -> str:
        """Treat null as an empty string."""
        return "" if v is None else str(v).strip()

    @field_validator("ksas", mode="before")
    @classmethod
    def limit_ksas(cls, v: list | None) -> list[str]:
        """Trim, de-duplicate case-insensitively and cap the KSA list."""
        seen: set[str] = set()
        ksas: list[str] = []
        for item in v or []:
            text = str(item).strip()
            if text and text.lower() not in seen:
                seen.add(text.lower())
                ksas.append(text)
        return ksas[:MAX_KSAS]

    @field_validator("acronyms", mode="before")
    @classmethod
    def upper_acronyms(cls, v: list | None) -> list[str]:
        """Upper-case and de-duplicate acronyms."""
        acronyms: list[str] = []
        for item in v or []:
            text = str(item).strip().upper()
            if text and text not in acronyms:
                acronyms.append(text)
        return acronyms

    def all_terms(self) -> list[str]:
        """KSAs followed by acronyms not already listed."""
        keys = {ksa.lower() for ksa in self.ksas}
        return self.ksas + [a for a in self.acronyms if a.lower() not in keys]
