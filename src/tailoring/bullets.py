"""Bullet enhancement: inject at most one matched term per bullet.

A term is scored against each bullet on token overlap, match confidence and
a context table keyed by term category and the bullet's character. The best
term is injected only when its score clears the acceptance threshold, and a
run-wide usage counter stops the same term from appearing in every bullet.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from enum import Enum
from typing import TYPE_CHECKING

from src.extractor.models import TermCategory
from src.matching.lexical import contains_term, is_technical, overlap_ratio, tokenize
from src.tailoring.config import TailoringConfig, get_tailoring_config
from src.tailoring.models import TailoredBullet

if TYPE_CHECKING:
    from src.matching.models import Match

logger = logging.getLogger(__name__)


class BulletContext(str, Enum):
    """Dominant character of a bullet."""

    TECHNICAL = "technical"
    ANALYTICAL = "analytical"
    PROCESS = "process"
    ADMINISTRATIVE = "administrative"
    GENERAL = "general"


CONTEXT_VOCABULARY: dict[BulletContext, frozenset[str]] = {
    BulletContext.TECHNICAL: frozenset(
        {
            "api", "apis", "application", "applications", "architected", "automated",
            "automation", "built", "cloud", "code", "coded", "configured", "dashboard",
            "dashboards", "database", "databases", "debugged", "deployed", "developed",
            "engineered", "implemented", "infrastructure", "integrated", "migrated",
            "network", "pipeline", "pipelines", "platform", "programmed", "queries",
            "query", "script", "scripted", "scripts", "server", "servers", "software",
            "system", "systems", "tool", "tools",
        }
    ),
    BulletContext.ANALYTICAL: frozenset(
        {
            "analysis", "analyzed", "analysed", "assessed", "audited", "data",
            "evaluated", "forecast", "forecasting", "forecasts", "insights",
            "interpreted", "investigated", "kpi", "kpis", "measured", "metrics",
            "modeled", "modelled", "reconciled", "reporting", "reports", "research",
            "researched", "statistics", "trends",
        }
    ),
    BulletContext.PROCESS: frozenset(
        {
            "compliance", "coordinated", "established", "executed", "facilitated",
            "improved", "led", "managed", "operations", "organized", "oversaw",
            "planned", "procedures", "process", "processes", "program", "project",
            "projects", "quality", "standardized", "streamlined", "workflow",
            "workflows",
        }
    ),
    BulletContext.ADMINISTRATIVE: frozenset(
        {
            "answered", "appointments", "booked", "calendar", "calendars", "calls",
            "correspondence", "filed", "filing", "greeted", "mail", "meetings",
            "ordered", "paperwork", "phone", "phones", "photocopied", "records",
            "scheduled", "sorted", "supplies", "travel", "typed", "visitors",
        }
    ),
}

# Ties go to the earlier context
_CONTEXT_PRIORITY = (
    BulletContext.TECHNICAL,
    BulletContext.ANALYTICAL,
    BulletContext.PROCESS,
    BulletContext.ADMINISTRATIVE,
)

_TOOL_TERM = {
    BulletContext.TECHNICAL: 0.2,
    BulletContext.ANALYTICAL: -0.3,
    BulletContext.PROCESS: -0.3,
    BulletContext.ADMINISTRATIVE: -0.3,
    BulletContext.GENERAL: -0.3,
}

CONTEXT_ADJUSTMENTS: dict[TermCategory, dict[BulletContext, float]] = {
    TermCategory.TECHNOLOGIES: _TOOL_TERM,
    TermCategory.SYSTEMS: _TOOL_TERM,
    TermCategory.PROCESSES: {
        BulletContext.TECHNICAL: 0.05,
        BulletContext.ANALYTICAL: 0.05,
        BulletContext.PROCESS: 0.2,
        BulletContext.ADMINISTRATIVE: -0.1,
        BulletContext.GENERAL: 0.0,
    },
    TermCategory.DOMAIN: {
        BulletContext.TECHNICAL: 0.05,
        BulletContext.ANALYTICAL: 0.2,
        BulletContext.PROCESS: 0.1,
        BulletContext.ADMINISTRATIVE: -0.5,
        BulletContext.GENERAL: 0.0,
    },
    TermCategory.CERTIFICATIONS: {context: -0.4 for context in BulletContext},
}

_WORD_RE = re.compile(r"[A-Za-z0-9][A-Za-z0-9+#./-]*")
_FINAL_PUNCT = re.compile(r"[.!?;:]+$")
_OXFORD_LIST = re.compile(r",\s(?:and|&)\s")
_PLAIN_LIST = re.compile(r"(,\s[^,]+?)(\s(?:and|&)\s)")
_TOOL_PHRASE = re.compile(
    r"\b(?:using|leveraging|utilizing|via)\s+(?P<obj>[^,;]+?)"
    r"(?=\s+(?:to|for|by|across|that|which|in order)\b|[,;]|$)",
    re.IGNORECASE,
)
_PURPOSE_CLAUSE = re.compile(r"\s(?:to|for|by|across)\s", re.IGNORECASE)
_MIN_VERB_PHRASE_WORDS = 2


class TermUsage:
    """Run-wide count of how often each term has been injected."""

    def __init__(self, cap: int = 1):
        self.cap = cap
        self._counts: Counter[str] = Counter()

    def count(self, term: str) -> int:
        return self._counts[term.lower()]

    def available(self, term: str) -> bool:
        return self.count(term) < self.cap

    def record(self, term: str) -> None:
        self._counts[term.lower()] += 1

    def as_dict(self) -> dict[str, int]:
        return dict(self._counts)


def detect_context(bullet: str) -> BulletContext:
    """Classify a bullet by the vocabulary it uses.

    Words that look like tools or acronyms count as technical.
    """
    words = _WORD_RE.findall(bullet)
    lowered = [w.lower().rstrip(".,") for w in words]
    scores = {
        context: sum(1 for w in lowered if w in vocabulary)
        for context, vocabulary in CONTEXT_VOCABULARY.items()
    }
    scores[BulletContext.TECHNICAL] += sum(1 for w in words if is_technical(w.rstrip(".,")))

    best = max(_CONTEXT_PRIORITY, key=lambda c: (scores[c], -_CONTEXT_PRIORITY.index(c)))
    return best if scores[best] > 0 else BulletContext.GENERAL


def insert_term(bullet: str, term: str) -> tuple[str, str]:
    """Insert a term at a grammatically safe point.

    Tries, in order: inside an existing comma list, after an existing
    "using X" phrase, after the main verb phrase (before a to/for/by
    clause), and finally a trailing "using <term>" clause. Sentence-final
    punctuation is preserved.

    Returns:
        (new_text, insertion) where insertion names the point used.
    """
    text = bullet.rstrip()
    final = _FINAL_PUNCT.search(text)
    suffix = final.group(0) if final else ""
    body = text[: final.start()] if final else text

    oxford = _OXFORD_LIST.search(body)
    if oxford:
        pos = oxford.start()
        return f"{body[:pos]}, {term}{body[pos:]}{suffix}", "list"

    plain = _PLAIN_LIST.search(body)
    if plain:
        pos = plain.end(1)
        return f"{body[:pos]}, {term}{body[pos:]}{suffix}", "list"

    phrase = _TOOL_PHRASE.search(body)
    if phrase:
        pos = phrase.end("obj")
        return f"{body[:pos]} and {term}{body[pos:]}{suffix}", "phrase"

    clause = _PURPOSE_CLAUSE.search(body)
    if clause and len(body[: clause.start()].split()) >= _MIN_VERB_PHRASE_WORDS:
        pos = clause.start()
        return f"{body[:pos]} using {term}{body[pos:]}{suffix}", "verb"

    return f"{body} using {term}{suffix}", "trailing"


class BulletEnhancer:
    """Selects and injects matched terms into resume bullets."""

    def __init__(self, config: TailoringConfig | None = None):
        """Initialize the enhancer.

        Args:
            config: Optional TailoringConfig. Uses global config if not provided.
        """
        self.config = config or get_tailoring_config()

    def new_usage(self) -> TermUsage:
        return TermUsage(cap=self.config.term_usage_cap)

    def score(self, bullet: str, match: Match, usage: TermUsage) -> float:
        """Contextual fit of a matched term for one bullet."""
        overlap = overlap_ratio(tokenize(match.term.text), tokenize(bullet))
        context = detect_context(bullet)
        adjustment = CONTEXT_ADJUSTMENTS.get(match.term.category, {}).get(context, 0.0)
        return (
            self.config.overlap_weight * overlap
            + self.config.confidence_weight * match.confidence
            + adjustment
            - self.config.usage_penalty * usage.count(match.term.text)
        )

    def enhance(
        self,
        bullets: list[str],
        matches: list[Match],
        usage: TermUsage | None = None,
    ) -> list[TailoredBullet]:
        """Enhance bullets in order.

        Args:
            bullets: Bullet texts.
            matches: Ranked matches to draw terms from.
            usage: Counter shared across calls of one run. A new one is
                created when not provided.

        Returns:
            One TailoredBullet per input bullet, in the same order.
        """
        usage = usage or self.new_usage()
        results: list[TailoredBullet] = []

        for bullet in bullets:
            best, best_score = self._select(bullet, matches, usage)
            if best is None or best_score < self.config.bullet_acceptance_threshold:
                results.append(TailoredBullet(original=bullet, text=bullet))
                continue

            text, insertion = insert_term(bullet, best.term.text)
            usage.record(best.term.text)
            logger.debug(
                f"Injected '{best.term.text}' ({insertion}, score={best_score:.2f})"
            )
            results.append(
                TailoredBullet(
                    original=bullet,
                    text=text,
                    injected_term=best.term.text,
                    score=round(best_score, 4),
                    insertion=insertion,
                )
            )

        injected = sum(1 for b in results if b.changed)
        logger.info(f"Enhanced {injected}/{len(results)} bullets")
        return results

    def _select(
        self,
        bullet: str,
        matches: list[Match],
        usage: TermUsage,
    ) -> tuple[Match | None, float]:
        best: Match | None = None
        best_score = float("-inf")
        for match in matches:
            term = match.term.text
            if not usage.available(term) or contains_term(term, bullet):
                continue
            score = self.score(bullet, match, usage)
            if score > best_score:
                best, best_score = match, score
        return best, best_score
