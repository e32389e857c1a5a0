"""Unit tests for the summary rewrite state machine."""

import pytest

from src.extractor.models import TargetJob, Term, TermCategory
from src.llm.client import LLMError
from src.matching.models import Match, MatchKind
from src.tailoring.config import TailoringConfig
from src.tailoring.models import SummaryState
from src.tailoring.summary import (
    SummaryRewriter,
    copies_original,
    count_summary_lines,
    deterministic_summary,
    overlap_terms,
    ranked_terms,
    validate_summary,
)

ORIGINAL = "Data analyst with six years of experience turning raw data into forecasts. Loves data."
GOOD_REWRITE = (
    "Analyst who builds Python dashboards for finance teams.\n"
    "Automates reporting to shorten the monthly close."
)


def _match(text: str, kind: MatchKind = MatchKind.EXACT, confidence: float = 1.0) -> Match:
    return Match(
        term=Term(text=text, category=TermCategory.TECHNOLOGIES),
        kind=kind,
        confidence=confidence,
    )


@pytest.fixture
def target():
    return TargetJob(
        description="Python forecasting role. Python dashboards.",
        title="Data Analyst",
        company="Acme",
    )


@pytest.fixture
def config():
    return TailoringConfig(_env_file=None)


class TestSummaryValidation:
    """Tests for the acceptance checks."""

    def test_count_lines_or_sentences(self):
        assert count_summary_lines("One. Two.") == 2
        assert count_summary_lines("A\nB\n\n") == 2
        assert count_summary_lines("Just one sentence") == 1

    def test_copies_original(self):
        copied = "Data analyst with six years of experience turning raw data into forecasts."
        assert copies_original(copied + "\nNew line.", ORIGINAL)

    def test_short_sentences_may_repeat(self):
        assert not copies_original("Loves data.\nSomething new.", ORIGINAL)

    def test_validate_outcomes(self):
        assert validate_summary("", ORIGINAL) == "empty"
        assert validate_summary("Only one sentence here", ORIGINAL) == "too_short"
        assert validate_summary(
            "Data analyst with six years of experience turning raw data into forecasts. More.",
            ORIGINAL,
        ) == "copied"
        assert validate_summary(GOOD_REWRITE, ORIGINAL) is None


class TestTermHelpers:
    """Tests for term ranking and overlap."""

    def test_ranked_terms_sorted_and_deduplicated(self):
        matches = [
            _match("Tableau", MatchKind.SEMANTIC, 0.9),
            _match("SQL"),
            _match("sql"),
        ]
        assert ranked_terms(matches) == ["SQL", "Tableau"]

    def test_overlap_terms_by_target_frequency(self, target):
        source = "Built dashboards with Python and forecasting models"
        assert overlap_terms(source, target.description) == [
            "Python",
            "forecasting",
            "dashboards",
        ]


class TestDeterministicSummary:
    """Tests for the no-LLM fallback summary."""

    def test_two_lines_from_shared_words(self, target):
        text = deterministic_summary(
            "Built dashboards with Python and forecasting models", target
        )

        assert text == (
            "Professional with hands-on experience in Python, forecasting and dashboards.\n"
            "Brings this experience to Data Analyst."
        )

    def test_more_terms_go_to_second_line(self):
        target = TargetJob(description="alpha bravo charlie delta echoes")
        text = deterministic_summary("alpha bravo charlie delta echoes", target)

        lines = text.split("\n")
        assert lines[1] == "Background also covers delta and echoes, relevant to this role."

    def test_no_overlap_keeps_original(self, target):
        text = deterministic_summary("Nothing shared", target, original_summary="  Old \n summary ")
        assert text == "Old summary"


class TestSummaryRewriter:
    """Tests for the rewrite state machine."""

    @pytest.mark.asyncio
    async def test_first_attempt_succeeds(self, config, mock_llm, target):
        mock_llm.generate_text.return_value = GOOD_REWRITE
        rewriter = SummaryRewriter(config=config, llm=mock_llm)

        result = await rewriter.rewrite("resume", ORIGINAL, target, [_match("Python")])

        assert result.state == SummaryState.SUCCESS
        assert result.succeeded
        assert result.text == GOOD_REWRITE
        assert len(result.attempts) == 1
        assert mock_llm.generate_text.call_args.kwargs["temperature"] == 0.3

    @pytest.mark.asyncio
    async def test_escalates_until_accepted(self, config, mock_llm, target):
        mock_llm.generate_text.side_effect = ["", "One line only", GOOD_REWRITE]
        rewriter = SummaryRewriter(config=config, llm=mock_llm)

        result = await rewriter.rewrite("resume", ORIGINAL, target, [])

        assert result.state == SummaryState.SUCCESS
        assert [a.outcome for a in result.attempts] == ["empty", "too_short", "accepted"]
        assert [a.temperature for a in result.attempts] == [0.3, 0.45, 0.6]
        assert [a.term_budget for a in result.attempts] == [3, 5, 8]

    @pytest.mark.asyncio
    async def test_falls_back_after_all_attempts(self, config, mock_llm, target):
        mock_llm.generate_text.side_effect = LLMError("down")
        rewriter = SummaryRewriter(config=config, llm=mock_llm)

        result = await rewriter.rewrite(
            "Built dashboards with Python and forecasting models", ORIGINAL, target, []
        )

        assert result.state == SummaryState.FALLBACK_DETERMINISTIC
        assert not result.succeeded
        assert len(result.attempts) == config.summary_max_attempts
        assert all(a.outcome == "error" for a in result.attempts)
        assert result.text.startswith("Professional with hands-on experience in Python")

    @pytest.mark.asyncio
    async def test_copied_output_rejected(self, config, mock_llm, target):
        copied = (
            "Data analyst with six years of experience turning raw data into forecasts.\n"
            "Something new."
        )
        mock_llm.generate_text.side_effect = [copied, GOOD_REWRITE]
        rewriter = SummaryRewriter(config=config, llm=mock_llm)

        result = await rewriter.rewrite("resume", ORIGINAL, target, [])

        assert result.attempts[0].outcome == "copied"
        assert result.text == GOOD_REWRITE

    @pytest.mark.asyncio
    async def test_term_budget_limits_prompt_terms(self, config, mock_llm, target):
        mock_llm.generate_text.return_value = GOOD_REWRITE
        rewriter = SummaryRewriter(config=config, llm=mock_llm)
        matches = [_match(name) for name in ("Alpha", "Bravo", "Charlie", "Delta")]

        await rewriter.rewrite("resume", ORIGINAL, target, matches)

        prompt = mock_llm.generate_text.call_args.kwargs["prompt"]
        assert "Alpha, Bravo, Charlie" in prompt
        assert "Delta" not in prompt
