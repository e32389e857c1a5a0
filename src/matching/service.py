"""Term matching service.

Matches extracted terms against a target job description using a tiered
exact -> lexical -> semantic strategy. Each term short-circuits at the first
tier that accepts it.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from src.llm.client import LLMClient, LLMError
from src.matching.config import MatchingConfig, get_matching_config
from src.matching.lexical import (
    candidate_phrases,
    contains_term,
    overlap_ratio,
    tokenize,
)
from src.matching.models import Match, MatchKind, SemanticJudgement, sort_matches
from src.matching.prompts import SEMANTIC_SYSTEM_PROMPT, build_semantic_prompt

if TYPE_CHECKING:
    from src.extractor.models import Term

logger = logging.getLogger(__name__)

# Candidate pool drawn from the target before per-term capping
_CANDIDATE_POOL_FACTOR = 4


class TermMatchingService:
    """Service for matching terms against a target job description.

    Matching never raises because of the text-generation service: a failed
    or timed-out semantic judgement falls back to lexical overlap.
    """

    def __init__(
        self,
        config: MatchingConfig | None = None,
        llm: LLMClient | None = None,
    ):
        """Initialize the matching service.

        Args:
            config: Optional MatchingConfig. Uses global config if not provided.
            llm: Optional LLMClient for the semantic tier. Created on first use.
        """
        self.config = config or get_matching_config()
        self._llm = llm

    @property
    def llm(self) -> LLMClient:
        """Client used by the semantic tier."""
        if self._llm is None:
            self._llm = LLMClient()
        return self._llm

    async def match(
        self,
        terms: list[Term],
        target_text: str,
        target_terms: list[str] | None = None,
    ) -> list[Match]:
        """Match terms against the target description.

        Args:
            terms: Candidate terms. Duplicate texts (case-insensitive) are
                matched once.
            target_text: Target job description text.
            target_terms: Optional pre-extracted terms from the target, used
                to widen matching.

        Returns:
            Matches sorted by kind priority, then descending confidence.
        """
        unique = _dedupe_terms(terms)
        haystack = "\n".join([target_text or "", *(target_terms or [])]).strip()
        if not unique or not haystack:
            return []

        target_tokens = tokenize(haystack, self.config.min_token_length)
        candidates = candidate_phrases(
            haystack,
            limit=self.config.max_semantic_candidates * _CANDIDATE_POOL_FACTOR,
        )
        semaphore = asyncio.Semaphore(self.config.max_workers)

        async def run(term: Term) -> Match | None:
            async with semaphore:
                return await self.match_term(term, haystack, target_tokens, candidates)

        results = await asyncio.gather(*(run(term) for term in unique))
        matches = sort_matches([m for m in results if m is not None])

        counts = {kind: 0 for kind in MatchKind}
        for m in matches:
            counts[m.kind] += 1
        logger.info(
            f"Matched {len(matches)}/{len(unique)} terms "
            f"(exact={counts[MatchKind.EXACT]}, lexical={counts[MatchKind.LEXICAL]}, "
            f"semantic={counts[MatchKind.SEMANTIC]})"
        )
        return matches

    async def match_term(
        self,
        term: Term,
        haystack: str,
        target_tokens: set[str],
        candidates: list[str],
    ) -> Match | None:
        """Match a single term, stopping at the first accepting tier.

        Args:
            term: Term to match.
            haystack: Target text (plus widening terms).
            target_tokens: Pre-tokenized haystack.
            candidates: Ranked candidate phrases from the haystack.

        Returns:
            Match, or None if no tier accepted the term.
        """
        if contains_term(term.text, haystack):
            return Match(
                term=term,
                kind=MatchKind.EXACT,
                confidence=1.0,
                evidence=f"'{term.text}' appears in the target",
            )

        term_tokens = tokenize(term.text, self.config.min_token_length)
        ratio = overlap_ratio(term_tokens, target_tokens)
        if ratio > self.config.lexical_threshold:
            shared = ", ".join(sorted(term_tokens & target_tokens))
            return Match(
                term=term,
                kind=MatchKind.LEXICAL,
                confidence=round(ratio, 4),
                evidence=f"shared tokens: {shared}",
            )

        if not self.config.semantic_enabled:
            return None

        pool = [c for c in candidates if c.lower() != term.key]
        return await self._match_semantic(
            term, term_tokens, pool[: self.config.max_semantic_candidates]
        )

    async def _match_semantic(
        self,
        term: Term,
        term_tokens: set[str],
        pool: list[str],
    ) -> Match | None:
        best: Match | None = None

        for candidate in pool:
            try:
                judgement = await asyncio.wait_for(
                    self._judge(term.text, candidate),
                    timeout=self.config.semantic_timeout,
                )
            except (LLMError, asyncio.TimeoutError) as e:
                logger.warning(
                    f"Semantic matching unavailable for '{term.text}', "
                    f"using lexical fallback: {e}"
                )
                return best or self._lexical_fallback(term, term_tokens, pool)

            logger.debug(
                f"Semantic '{term.text}' vs '{candidate}': "
                f"similar={judgement.similar}, confidence={judgement.confidence:.2f}"
            )
            if (
                judgement.similar
                and judgement.confidence > self.config.semantic_accept_threshold
            ):
                if best is None or judgement.confidence > best.confidence:
                    best = Match(
                        term=term,
                        kind=MatchKind.SEMANTIC,
                        confidence=judgement.confidence,
                        evidence=f"{candidate}: {judgement.explanation}".strip(": "),
                    )
                if judgement.confidence > self.config.semantic_stop_threshold:
                    break

        return best

    async def _judge(self, term: str, candidate: str) -> SemanticJudgement:
        return await self.llm.generate_json(
            prompt=build_semantic_prompt(term, candidate),
            output_model=SemanticJudgement,
            system_prompt=SEMANTIC_SYSTEM_PROMPT,
            temperature=self.config.semantic_temperature,
        )

    def _lexical_fallback(
        self,
        term: Term,
        term_tokens: set[str],
        pool: list[str],
    ) -> Match | None:
        """Best lexical overlap against the candidate pool, never escalated.

        Candidates are short, so acceptance uses the overlap ratio but the
        reported confidence is the share of the term's own tokens covered.
        That share never exceeds the lexical threshold here, so a fallback
        match ranks below any match from the lexical tier.
        """
        best_ratio = 0.0
        best_coverage = 0.0
        best_candidate: str | None = None
        for candidate in pool:
            candidate_tokens = tokenize(candidate, self.config.min_token_length)
            ratio = overlap_ratio(term_tokens, candidate_tokens)
            coverage = len(term_tokens & candidate_tokens) / max(len(term_tokens), 1)
            if (ratio, coverage) > (best_ratio, best_coverage):
                best_ratio, best_coverage = ratio, coverage
                best_candidate = candidate

        if best_candidate is None or best_ratio <= self.config.lexical_threshold:
            return None
        return Match(
            term=term,
            kind=MatchKind.LEXICAL,
            confidence=round(best_coverage, 4),
            evidence=f"lexical fallback: {best_candidate}",
        )


def _dedupe_terms(terms: list[Term]) -> list[Term]:
    seen: set[str] = set()
    unique: list[Term] = []
    for term in terms:
        if term.key not in seen:
            seen.add(term.key)
            unique.append(term)
    return unique
