"""Cover letter body generation.

Produces 3-5 grounded body paragraphs for a target job, with no greeting and
no signature, targeting the configured word range with one revision pass.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from src.llm.client import LLMClient, LLMError
from src.tailoring.config import TailoringConfig, get_tailoring_config
from src.tailoring.models import CoverLetterBody

if TYPE_CHECKING:
    from src.extractor.models import TargetJob

logger = logging.getLogger(__name__)

MAX_SOURCE_CHARS = 12000

_SIGN_OFF_TAIL = re.compile(
    r"(?:^|\n)[ \t]*(?:Sincerely|Regards|Best regards|Kind regards|Respectfully)[ \t,]*\n[\s\S]*$",
    re.IGNORECASE,
)
_GREETING = re.compile(r"^\s*(?:Dear|Hello|Hi|To whom)\b[^\n]*\n+", re.IGNORECASE)
_BLANK_RUNS = re.compile(r"\n{3,}")

COVER_LETTER_SYSTEM_PROMPT = """You write the body of a cover letter.

CRITICAL RULES:
- NEVER fabricate experience, skills, employers, dates or accomplishments.
- Only reference facts present in the candidate's resume; keep metrics exactly as written.
- Write {min_paragraphs}-{max_paragraphs} paragraphs separated by a blank line.
- Target {min_words}-{max_words} words in total.
- No greeting ("Dear ..."), no sign-off, no signature, no contact details.
- Output ONLY the paragraphs.
"""


class CoverLetterService:
    """Service for generating cover letter bodies."""

    def __init__(
        self,
        config: TailoringConfig | None = None,
        llm: LLMClient | None = None,
    ):
        """Initialize the cover letter service.

        Args:
            config: Optional TailoringConfig. Uses global config if not provided.
            llm: Optional LLMClient. A default client is created if not provided.
        """
        self.config = config or get_tailoring_config()
        self.llm = llm or LLMClient()

    async def generate_body(self, source_text: str, target: TargetJob) -> CoverLetterBody:
        """Generate the body of a cover letter.

        Args:
            source_text: Candidate resume text.
            target: Target job.

        Returns:
            CoverLetterBody within the configured word range where possible.

        Raises:
            LLMError: If generation fails or every draft is empty.
        """
        min_words = self.config.cover_letter_min_words
        max_words = self.config.cover_letter_max_words
        system_prompt = COVER_LETTER_SYSTEM_PROMPT.format(
            min_paragraphs=3,
            max_paragraphs=5,
            min_words=min_words,
            max_words=max_words,
        )
        base_prompt = build_cover_letter_prompt(source_text, target)

        prompt = base_prompt
        text = ""
        # One revision pass to pull the draft into the word range
        for _attempt in range(2):
            raw = await self.llm.generate_text(
                prompt=prompt,
                system_prompt=system_prompt,
                temperature=self.config.cover_letter_temperature,
            )
            text = cleanup_letter_body(raw)
            word_count = count_words(text)
            if min_words <= word_count <= max_words:
                break
            logger.debug(f"Cover letter draft has {word_count} words; requesting revision")
            prompt = (
                f"{base_prompt}\n\n---\n\n# REVISION REQUEST\n\n"
                f"The draft below is {word_count} words. Rewrite it to be "
                f"{min_words}-{max_words} words. Keep the same facts; add no new claims.\n\n"
                f"## Draft\n\n{text}"
            )

        if not text:
            raise LLMError("Cover letter body was empty")

        text = trim_to_words(text, max_words)
        body = CoverLetterBody(text=text, word_count=count_words(text))
        logger.info(
            f"Generated cover letter body: {body.word_count} words, "
            f"{len(body.paragraphs)} paragraphs"
        )
        return body


def build_cover_letter_prompt(source_text: str, target: TargetJob) -> str:
    role = target.title or "the role"
    company = target.company or "the company"
    return "\n".join(
        [
            f"Write the cover letter body for the {role} position at {company}.",
            "",
            "JOB DESCRIPTION:",
            target.description,
            "",
            "CANDIDATE RESUME:",
            source_text[:MAX_SOURCE_CHARS],
        ]
    )


def cleanup_letter_body(text: str | None) -> str:
    """Drop a greeting and a trailing sign-off, and collapse blank-line runs."""
    if not text:
        return ""
    value = text.replace("\r\n", "\n").strip()
    value = _GREETING.sub("", value)
    value = _SIGN_OFF_TAIL.sub("", value)
    value = _BLANK_RUNS.sub("\n\n", value)
    return value.strip()


def count_words(text: str) -> int:
    """Count words in a text (whitespace-delimited)."""
    return len(text.split())


def trim_to_words(text: str, max_words: int) -> str:
    """Keep whole paragraphs up to ``max_words``; cut the last one if needed."""
    if count_words(text) <= max_words:
        return text
    kept: list[str] = []
    remaining = max_words
    for paragraph in text.split("\n\n"):
        words = paragraph.split()
        if not words:
            continue
        if len(words) <= remaining:
            kept.append(paragraph.strip())
            remaining -= len(words)
            continue
        if remaining > 0:
            kept.append(" ".join(words[:remaining]).rstrip(",;:") + "...")
        break
    return "\n\n".join(kept)
