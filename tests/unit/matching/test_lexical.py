"""Unit tests for lexical matching utilities."""

from src.matching.lexical import (
    candidate_phrases,
    contains_term,
    is_technical,
    normalize_text,
    overlap_ratio,
    tokenize,
)


class TestTokenize:
    """Tests for tokenize."""

    def test_keeps_tool_symbols_and_drops_trailing_punctuation(self):
        tokens = tokenize("Built C++ and Node.js apps.")
        assert tokens == {"built", "c++", "and", "node.js", "apps"}

    def test_min_length(self):
        assert tokenize("R is a go to tool", min_length=3) == {"tool"}
        assert "go" in tokenize("R is a go to tool", min_length=2)


class TestOverlapRatio:
    """Tests for overlap_ratio."""

    def test_ratio_uses_smaller_side(self):
        assert overlap_ratio({"a", "b"}, {"b", "c", "d"}) == 0.5

    def test_empty_side_is_zero(self):
        assert overlap_ratio(set(), {"a"}) == 0.0
        assert overlap_ratio({"a"}, set()) == 0.0


class TestContainsTerm:
    """Tests for contains_term."""

    def test_case_and_whitespace_insensitive(self):
        assert contains_term("power  bi", "Experience with Power BI required")

    def test_missing_term(self):
        assert not contains_term("Tableau", "Experience with Power BI required")

    def test_blank_term_never_matches(self):
        assert not contains_term("  ", "anything")

    def test_normalize_text(self):
        assert normalize_text("  Data \n Analysis ") == "data analysis"


class TestIsTechnical:
    """Tests for is_technical."""

    def test_known_tools_and_shapes(self):
        assert is_technical("python")
        assert is_technical("ETL")
        assert is_technical("S3")
        assert is_technical("node.js")

    def test_plain_words(self):
        assert not is_technical("dashboards")
        assert not is_technical("A")


class TestCandidatePhrases:
    """Tests for candidate_phrases."""

    def test_technical_words_rank_first(self):
        phrases = candidate_phrases("SQL reporting. SQL dashboards", limit=3)

        assert phrases[0] == "SQL"
        assert len(phrases) == 3
        assert "SQL reporting" in phrases

    def test_stopwords_break_phrases(self):
        phrases = candidate_phrases("experience with forecasting", limit=10)
        assert phrases == ["forecasting"]
