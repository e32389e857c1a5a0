"""Unit tests for TailoringConfig."""

import pytest

from src.tailoring.config import TailoringConfig, get_tailoring_config, reset_tailoring_config


class TestTailoringConfig:
    """Tests for TailoringConfig defaults and validation."""

    def test_defaults(self):
        config = TailoringConfig(_env_file=None)

        assert config.summary_attempt_temperatures == [0.3, 0.45, 0.6, 0.75]
        assert config.summary_term_budgets == [3, 5, 8, 12]
        assert config.summary_max_attempts == 4
        assert config.bullet_acceptance_threshold == 0.45
        assert config.term_usage_cap == 1

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("TAILORING_TERM_USAGE_CAP", "2")
        assert TailoringConfig(_env_file=None).term_usage_cap == 2

    def test_ladder_lengths_must_match(self):
        with pytest.raises(ValueError):
            TailoringConfig(
                _env_file=None,
                summary_attempt_temperatures=[0.3, 0.5],
                summary_term_budgets=[3],
            )

    def test_ladder_must_not_be_empty(self):
        with pytest.raises(ValueError):
            TailoringConfig(
                _env_file=None,
                summary_attempt_temperatures=[],
                summary_term_budgets=[],
            )

    def test_word_range_must_be_ordered(self):
        with pytest.raises(ValueError):
            TailoringConfig(
                _env_file=None,
                cover_letter_min_words=400,
                cover_letter_max_words=300,
            )


class TestTailoringConfigSingleton:
    """Tests for the singleton accessors."""

    def teardown_method(self):
        reset_tailoring_config()

    def test_get_returns_cached_instance(self):
        assert get_tailoring_config() is get_tailoring_config()

    def test_reset_forces_new_instance(self):
        first = get_tailoring_config()
        reset_tailoring_config()
        assert get_tailoring_config() is not first
