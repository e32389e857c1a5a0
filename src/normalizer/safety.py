"""Input plausibility checks and render-safety checks."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from src.normalizer.layout import truncate_label

logger = logging.getLogger(__name__)

MIN_RESUME_CHARS = 100
MAX_RESUME_ISSUES = 3

_NAME_LIKE = re.compile(r"[A-Z][a-z]+\s+[A-Z][a-z]+")
_EXPERIENCE_WORD = re.compile(r"\b(experience|work|employment)\b", re.IGNORECASE)
_LEADING_GLYPH = re.compile(r"^\s*[•*]")


class RenderSafetyError(RuntimeError):
    """Raised when a normalized document would still render corrupted."""

    def __init__(self, problems: list[str]):
        super().__init__("Document is not render-safe: " + "; ".join(problems))
        self.problems = problems


@dataclass
class SourceTextReport:
    """Outcome of the resume text plausibility check."""

    issues: list[str] = field(default_factory=list)

    @property
    def accepted(self) -> bool:
        return len(self.issues) <= MAX_RESUME_ISSUES


def validate_source_text(text: str | None) -> SourceTextReport:
    """Check that text plausibly is a resume.

    Each failed check is an advisory issue; the text is rejected only when
    more than three checks fail.
    """
    value = text or ""
    report = SourceTextReport()
    if len(value.strip()) < MIN_RESUME_CHARS:
        report.issues.append(f"text is shorter than {MIN_RESUME_CHARS} characters")
    if not _NAME_LIKE.search(value):
        report.issues.append("no name-like line found")
    if "@" not in value:
        report.issues.append("no email address found")
    if not _EXPERIENCE_WORD.search(value):
        report.issues.append("no experience or employment section found")

    if report.issues:
        logger.warning(f"Source text issues: {', '.join(report.issues)}")
    return report


def check_render_safety(data: dict, max_label_chars: int = 40) -> list[str]:
    """Verify render invariants and truncate over-long skill labels.

    Args:
        data: The document's ``data`` subtree, modified in place.
        max_label_chars: Longest skill name or keyword kept as is.

    Returns:
        Descriptions of the truncations made.

    Raises:
        RenderSafetyError: If the summary contains a newline, or an
            experience bullet contains a newline or starts with a bullet glyph.
    """
    problems: list[str] = []
    fixes: list[str] = []

    content = (data.get("summary") or {}).get("content") or ""
    if "\n" in content or "\r" in content:
        problems.append("summary contains line breaks")

    sections = data.get("sections") or {}
    experience = sections.get("experience") or {}
    for index, item in enumerate(experience.get("items") or []):
        bullets = item.get("description") if isinstance(item, dict) else None
        for bullet in bullets if isinstance(bullets, list) else []:
            if "\n" in str(bullet) or _LEADING_GLYPH.match(str(bullet)):
                problems.append(f"experience item {index} has an unclean bullet")
                break

    skills = sections.get("skills") or {}
    for item in skills.get("items") or []:
        if not isinstance(item, dict):
            continue
        name = item.get("name")
        if isinstance(name, str) and len(name) > max_label_chars:
            item["name"] = truncate_label(name, max_label_chars)
            fixes.append(f"truncated skill name '{name}'")
        if isinstance(item.get("keywords"), list):
            keywords = []
            for keyword in item["keywords"]:
                text = str(keyword)
                if len(text) > max_label_chars:
                    fixes.append(f"truncated keyword '{text}'")
                    text = truncate_label(text, max_label_chars)
                keywords.append(text)
            item["keywords"] = keywords

    if problems:
        raise RenderSafetyError(problems)
    return fixes
