"""Summary rewrite as a bounded state machine.

States::

    ATTEMPT(0) -> ATTEMPT(1) -> ... -> ATTEMPT(n-1)
        |             |                    |
        +-> SUCCESS   +-> SUCCESS          +-> SUCCESS | FALLBACK_DETERMINISTIC

Each attempt raises the sampling temperature and the number of target terms
requested. An attempt is accepted when its sanitized output is non-empty, has
at least ``summary_min_lines`` lines and does not copy a sentence of the
original summary. When every attempt fails the summary is built from the
words the source resume and the job description share, with no call to the
text-generation service.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from typing import TYPE_CHECKING

from src.llm.client import LLMClient, LLMError
from src.matching.lexical import CANDIDATE_STOPWORDS
from src.matching.models import sort_matches
from src.normalizer.text import normalize_verbatim
from src.tailoring.config import TailoringConfig, get_tailoring_config
from src.tailoring.models import SummaryAttempt, SummaryRewriteResult, SummaryState
from src.tailoring.sanitize import sanitize_generated_text

if TYPE_CHECKING:
    from src.extractor.models import TargetJob
    from src.matching.models import Match

logger = logging.getLogger(__name__)

ACCEPTED = "accepted"

SUMMARY_SYSTEM_PROMPT = """You rewrite the professional summary of a resume for one specific job.

AUTHENTICITY CONTRACT:
- Use ONLY facts present in the candidate's resume. Never invent employers, titles, years, metrics, tools or certifications.
- Do NOT copy sentences from the current summary; express them in new words.
- Write 2-4 lines, one sentence per line.
- No name, contact details, URLs, greeting or signature.
- Output ONLY the summary text.
"""

MODE_INSTRUCTIONS = (
    "Lightly align the summary with the job. Use a key term only where the resume clearly supports it.",
    "Align the summary more clearly with the job's priorities and weave in the supported key terms.",
    "Lead with the experience most relevant to this job and use the job's own terminology wherever the resume supports it.",
    "Rewrite the summary around this job's priorities, using as many of the supported key terms as read naturally.",
)

_WORD_RE = re.compile(r"[A-Za-z][A-Za-z0-9+#-]*[A-Za-z0-9+#]|[A-Za-z]")
_SENTENCE_END = re.compile(r"(?<=[.!?])\s+")

FALLBACK_STOPWORDS = CANDIDATE_STOPWORDS | frozenset(
    {
        "ability", "across", "help", "helped", "make", "more", "most", "other",
        "part", "some", "than", "very", "what", "year", "great", "good", "best",
        "looking", "join", "company", "opportunity", "summary", "profile",
    }
)
_MIN_FALLBACK_WORD = 4


class SummaryRewriter:
    """Rewrites a resume summary toward a target job."""

    def __init__(
        self,
        config: TailoringConfig | None = None,
        llm: LLMClient | None = None,
    ):
        """Initialize the rewriter.

        Args:
            config: Optional TailoringConfig. Uses global config if not provided.
            llm: Optional LLMClient. A default client is created if not provided.
        """
        self.config = config or get_tailoring_config()
        self.llm = llm or LLMClient()

    async def rewrite(
        self,
        source_text: str,
        original_summary: str,
        target: TargetJob,
        matches: list[Match],
        candidate_name: str | None = None,
    ) -> SummaryRewriteResult:
        """Run the rewrite state machine to a terminal state.

        Args:
            source_text: Source resume text; the only allowed source of facts.
            original_summary: The summary being replaced.
            target: Target job.
            matches: Ranked matches; their terms are offered to the rewrite.
            candidate_name: Candidate name, stripped from generated output.

        Returns:
            SummaryRewriteResult with the final text, state and attempt trace.
        """
        terms = ranked_terms(matches)
        attempts: list[SummaryAttempt] = []
        state = SummaryState.ATTEMPT
        mode = 0
        text = ""

        while state is SummaryState.ATTEMPT:
            attempt, text = await self._attempt(
                mode, source_text, original_summary, target, terms, candidate_name
            )
            attempts.append(attempt)
            logger.debug(
                f"Summary attempt {mode} (t={attempt.temperature}): {attempt.outcome}"
            )
            state, mode = self._transition(mode, attempt)

        if state is SummaryState.SUCCESS:
            logger.info(f"Summary rewritten after {len(attempts)} attempt(s)")
            return SummaryRewriteResult(text=text, state=state, attempts=attempts)

        logger.warning(
            f"All {len(attempts)} summary attempts failed; using deterministic fallback"
        )
        fallback = deterministic_summary(
            source_text,
            target,
            original_summary,
            max_terms=self.config.summary_fallback_terms,
        )
        return SummaryRewriteResult(text=fallback, state=state, attempts=attempts)

    def _transition(self, mode: int, attempt: SummaryAttempt) -> tuple[SummaryState, int]:
        if attempt.outcome == ACCEPTED:
            return SummaryState.SUCCESS, mode
        if mode + 1 >= self.config.summary_max_attempts:
            return SummaryState.FALLBACK_DETERMINISTIC, mode
        return SummaryState.ATTEMPT, mode + 1

    async def _attempt(
        self,
        mode: int,
        source_text: str,
        original_summary: str,
        target: TargetJob,
        terms: list[str],
        candidate_name: str | None,
    ) -> tuple[SummaryAttempt, str]:
        temperature = self.config.summary_attempt_temperatures[mode]
        budget = self.config.summary_term_budgets[mode]
        attempt = SummaryAttempt(
            mode=mode, temperature=temperature, term_budget=budget, outcome=ACCEPTED
        )

        prompt = build_summary_prompt(
            mode,
            terms[:budget],
            target,
            source_text,
            original_summary,
            self.config.target_excerpt_chars,
        )
        try:
            raw = await self.llm.generate_text(
                prompt=prompt,
                system_prompt=SUMMARY_SYSTEM_PROMPT,
                temperature=temperature,
            )
        except LLMError as e:
            attempt.outcome = "error"
            attempt.detail = str(e)
            return attempt, ""

        text = sanitize_generated_text(raw, candidate_name)
        problem = validate_summary(
            text,
            original_summary,
            min_lines=self.config.summary_min_lines,
            copy_min_chars=self.config.summary_copy_min_chars,
        )
        if problem:
            attempt.outcome = problem
            return attempt, ""
        return attempt, text


def build_summary_prompt(
    mode: int,
    terms: list[str],
    target: TargetJob,
    source_text: str,
    original_summary: str,
    excerpt_chars: int,
) -> str:
    """Build the user prompt for one attempt."""
    instruction = MODE_INSTRUCTIONS[min(mode, len(MODE_INSTRUCTIONS) - 1)]
    role = " at ".join(p for p in (target.title, target.company) if p) or "the target role"
    parts = [
        f"Rewrite the summary for {role}.",
        instruction,
        "",
        "KEY TERMS (use only those the resume supports):",
        ", ".join(terms) if terms else "(none)",
        "",
        "JOB DESCRIPTION:",
        target.description[:excerpt_chars],
        "",
        "CURRENT SUMMARY (do not copy its sentences):",
        original_summary or "(none)",
        "",
        "RESUME:",
        source_text,
    ]
    return "\n".join(parts)


def validate_summary(
    text: str,
    original_summary: str,
    min_lines: int = 2,
    copy_min_chars: int = 20,
) -> str | None:
    """Check a sanitized rewrite against the authenticity contract.

    Returns:
        None if the text is acceptable, otherwise the reason
        ("empty", "too_short" or "copied").
    """
    if not text.strip():
        return "empty"
    if count_summary_lines(text) < min_lines:
        return "too_short"
    if copies_original(text, original_summary, copy_min_chars):
        return "copied"
    return None


def count_summary_lines(text: str) -> int:
    """Non-empty lines, or sentences when the text is a single line."""
    lines = [line for line in text.split("\n") if line.strip()]
    if len(lines) != 1:
        return len(lines)
    return len([s for s in _SENTENCE_END.split(lines[0]) if s.strip()])


def copies_original(text: str, original_summary: str, min_chars: int = 20) -> bool:
    """Whether text repeats any long-enough sentence of the original."""
    if not original_summary:
        return False
    haystack = _comparable(text)
    for sentence in _SENTENCE_END.split(normalize_verbatim(original_summary)):
        needle = _comparable(sentence)
        if len(needle) >= min_chars and needle in haystack:
            return True
    return False


def _comparable(text: str) -> str:
    return normalize_verbatim(text).lower().rstrip(".!?")


def ranked_terms(matches: list[Match]) -> list[str]:
    """Distinct matched term texts in match order."""
    seen: set[str] = set()
    terms: list[str] = []
    for match in sort_matches(matches):
        if match.term.key not in seen:
            seen.add(match.term.key)
            terms.append(match.term.text)
    return terms


def overlap_terms(source_text: str, target_text: str, limit: int = 6) -> list[str]:
    """Words shared by source and target, most frequent in the target first.

    Words keep their first casing in the target; ties keep target order.
    """
    source_words = {
        w.lower() for w in _WORD_RE.findall(source_text or "") if len(w) >= _MIN_FALLBACK_WORD
    }
    counts: Counter[str] = Counter()
    display: dict[str, str] = {}
    order: dict[str, int] = {}
    for word in _WORD_RE.findall(target_text or ""):
        key = word.lower()
        if len(word) < _MIN_FALLBACK_WORD or key in FALLBACK_STOPWORDS:
            continue
        if key not in source_words:
            continue
        counts[key] += 1
        display.setdefault(key, word)
        order.setdefault(key, len(order))

    ranked = sorted(counts, key=lambda k: (-counts[k], order[k]))
    return [display[k] for k in ranked[:limit]]


def deterministic_summary(
    source_text: str,
    target: TargetJob,
    original_summary: str = "",
    max_terms: int = 6,
) -> str:
    """Two-line summary built from source/target word overlap.

    Falls back to the whitespace-collapsed original summary when source and
    target share no usable words.
    """
    shared = overlap_terms(source_text, target.description, limit=max_terms)
    if not shared:
        return normalize_verbatim(original_summary)

    role = target.title or "this role"
    first, rest = shared[:3], shared[3:]
    lines = [f"Professional with hands-on experience in {_join_words(first)}."]
    if rest:
        lines.append(f"Background also covers {_join_words(rest)}, relevant to {role}.")
    else:
        lines.append(f"Brings this experience to {role}.")
    return "\n".join(lines)


def _join_words(words: list[str]) -> str:
    if len(words) == 1:
        return words[0]
    return ", ".join(words[:-1]) + " and " + words[-1]
