"""Tests for logging utility."""

import logging
from io import StringIO

import pytest


@pytest.fixture(autouse=True)
def clean_logging():
    from src.utils.logging import reset_logging

    reset_logging()
    yield
    reset_logging()


class TestLoggerConfiguration:
    """Test that the logger configures correctly."""

    def test_configure_logging_returns_app_logger(self):
        from src.utils.logging import configure_logging

        logger = configure_logging()
        assert isinstance(logger, logging.Logger)
        assert logger.name == "job_fit"

    def test_default_level_is_info(self):
        from src.utils.logging import configure_logging

        assert configure_logging().level == logging.INFO

    def test_reconfiguring_changes_level_without_new_handlers(self):
        """A second call only changes levels."""
        from src.utils.logging import configure_logging

        configure_logging(level="DEBUG")
        logger = configure_logging(level="warning")

        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1
        assert logger.handlers[0].level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self):
        from src.utils.logging import configure_logging

        assert configure_logging(level="chatty").level == logging.INFO


class TestLogOutput:
    """Test the log line format."""

    def test_log_line_has_level_name_and_message(self):
        from src.utils.logging import configure_logging

        logger = configure_logging(level="INFO")
        buffer = StringIO()
        handler = logging.StreamHandler(buffer)
        handler.setFormatter(logger.handlers[0].formatter)
        module_logger = logging.getLogger("src.matching.service")
        module_logger.addHandler(handler)

        try:
            module_logger.info("Matched 3/5 terms")
        finally:
            module_logger.removeHandler(handler)

        output = buffer.getvalue()
        assert " - src.matching.service - INFO - Matched 3/5 terms" in output

    def test_module_debug_is_filtered_at_info(self):
        from src.utils.logging import configure_logging

        configure_logging(level="INFO")

        assert not logging.getLogger("src.tailoring.summary").isEnabledFor(logging.DEBUG)


class TestPackageLoggers:
    """Test the src package and client library loggers."""

    def test_src_logger_shares_the_handler(self):
        from src.utils.logging import configure_logging

        app_logger = configure_logging(level="WARNING")

        package_logger = logging.getLogger("src")
        assert package_logger.level == logging.WARNING
        assert package_logger.handlers == app_logger.handlers
        assert package_logger.propagate is False

    def test_client_libraries_are_quieted(self):
        from src.utils.logging import configure_logging

        configure_logging(level="INFO")

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("LiteLLM").level == logging.WARNING

    def test_client_libraries_follow_debug(self):
        from src.utils.logging import configure_logging

        configure_logging(level="DEBUG")

        assert logging.getLogger("httpx").level == logging.DEBUG

    def test_reset_logging_restores_defaults(self):
        from src.utils.logging import configure_logging, reset_logging

        configure_logging()
        reset_logging()

        package_logger = logging.getLogger("src")
        assert package_logger.handlers == []
        assert package_logger.propagate is True
        assert logging.getLogger("httpx").level == logging.NOTSET
