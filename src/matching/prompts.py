"""Prompt builders for semantic term matching."""

from __future__ import annotations

SEMANTIC_SYSTEM_PROMPT = """You judge whether two resume/job terms are interchangeable.

You must follow these rules:
- Two terms are similar only if a hiring manager would accept one as evidence of the other
  (same skill, same technology family, or a direct synonym).
- Related but different tools or disciplines are NOT similar.
- Output MUST be valid JSON only (no markdown) with keys: similar, confidence, explanation.
"""


def build_semantic_prompt(term: str, candidate: str) -> str:
    """Build the user prompt for one semantic judgement."""
    return "\n".join(
        [
            "Are these interchangeable skills/technologies for a job application?",
            "",
            f"Candidate term: {term}",
            f"Job posting phrase: {candidate}",
            "",
            "Return JSON:",
            '{"similar": true|false, "confidence": 0.0-1.0, "explanation": "one sentence"}',
        ]
    )
