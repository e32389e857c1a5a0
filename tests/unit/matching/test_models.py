"""Unit tests for matching data models."""

import pytest
from pydantic import ValidationError

from src.extractor.models import Term, TermCategory
from src.matching.models import Match, MatchKind, SemanticJudgement, sort_matches


def _term(text: str) -> Term:
    return Term(text=text, category=TermCategory.TECHNOLOGIES)


class TestMatch:
    """Tests for the Match model."""

    def test_exact_requires_full_confidence(self):
        with pytest.raises(ValidationError):
            Match(term=_term("SQL"), kind=MatchKind.EXACT, confidence=0.9)

    def test_confidence_bounds(self):
        with pytest.raises(ValidationError):
            Match(term=_term("SQL"), kind=MatchKind.LEXICAL, confidence=1.5)

    def test_sort_by_kind_then_confidence(self):
        semantic = Match(term=_term("A"), kind=MatchKind.SEMANTIC, confidence=0.95)
        lexical_low = Match(term=_term("B"), kind=MatchKind.LEXICAL, confidence=0.6)
        lexical_high = Match(term=_term("C"), kind=MatchKind.LEXICAL, confidence=0.8)
        exact = Match(term=_term("D"), kind=MatchKind.EXACT, confidence=1.0)

        ordered = sort_matches([semantic, lexical_low, exact, lexical_high])

        assert [m.term.text for m in ordered] == ["D", "C", "B", "A"]


class TestSemanticJudgement:
    """Tests for the SemanticJudgement model."""

    def test_percentage_confidence_is_scaled(self):
        judgement = SemanticJudgement(similar=True, confidence=85)
        assert judgement.confidence == 0.85

    def test_defaults(self):
        judgement = SemanticJudgement(similar=False)

        assert judgement.confidence == 0.0
        assert judgement.explanation == ""
