"""Terminology extraction service."""

from __future__ import annotations

import logging
import re

from src.extractor.models import Term, TermCategory
from src.extractor.patterns import PATTERN_BATTERY, PatternRule

logger = logging.getLogger(__name__)

_TRIM_CHARS = " \t\r\n.,;:()[]{}\"'"


class TermExtractor:
    """Extracts categorized terminology candidates from free text.

    Extraction is purely lexical and deterministic: the same text always
    yields the same terms in the same order.
    """

    def __init__(self, rules: tuple[PatternRule, ...] = PATTERN_BATTERY) -> None:
        """Initialize the extractor.

        Args:
            rules: Ordered pattern battery. Earlier rules claim text first.
        """
        self.rules = rules

    def extract(self, text: str | None) -> list[Term]:
        """Extract terms from text.

        Each match is de-duplicated case-insensitively; the first-seen casing
        is kept for display. Terms are grouped by category.

        Args:
            text: Free text (resume, job history or job posting). May be None.

        Returns:
            List of terms; empty for empty or None input.
        """
        if not text or not text.strip():
            return []

        claimed: list[tuple[int, int]] = []
        seen: set[str] = set()
        grouped: dict[TermCategory, list[Term]] = {c: [] for c in TermCategory}

        for rule in self.rules:
            for match in rule.pattern.finditer(text):
                group = "term" if "term" in rule.pattern.groupindex else 0
                start, end = match.span(group)
                if _overlaps(claimed, start, end):
                    continue

                display = _clean(match.group(group))
                if len(display) < 2 or display.upper() in rule.exclude:
                    continue

                claimed.append((start, end))
                key = display.lower()
                if key in seen:
                    continue

                seen.add(key)
                grouped[rule.category].append(
                    Term(text=display, category=rule.category)
                )
                logger.debug(f"Rule {rule.name} extracted '{display}'")

        terms = [term for category in TermCategory for term in grouped[category]]
        logger.debug(f"Extracted {len(terms)} terms from {len(text)} chars")
        return terms

    def extract_texts(self, *texts: str | None) -> list[Term]:
        """Extract terms from several texts as one run."""
        joined = "\n".join(t for t in texts if t)
        return self.extract(joined)


def _overlaps(claimed: list[tuple[int, int]], start: int, end: int) -> bool:
    return any(start < c_end and c_start < end for c_start, c_end in claimed)


def _clean(raw: str) -> str:
    text = re.sub(r"\s+", " ", raw).strip(_TRIM_CHARS)
    # Keep a leading dot for names like ".NET"
    if raw.strip().startswith(".") and not text.startswith("."):
        text = "." + text
    return text
