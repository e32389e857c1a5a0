"""Logging configuration for the job-fit pipeline."""

import logging
import sys

# Application logger; module loggers live under the "src" package
LOGGER_NAME = "job_fit"
PACKAGE_LOGGER_NAME = "src"

# Client libraries that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "LiteLLM", "litellm")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_configured = False


def configure_logging(
    level: str | None = None,
    format_string: str = LOG_FORMAT,
    date_format: str = DATE_FORMAT,
) -> logging.Logger:
    """Configure and return the main application logger.

    The ``job_fit`` logger and the ``src`` package logger share one stderr
    handler. HTTP and LLM client libraries are held at WARNING unless the
    level is DEBUG.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Defaults to INFO if not specified.
        format_string: Format string for log messages.
        date_format: Format string for timestamps.

    Returns:
        The configured application logger.
    """
    global _configured

    log_level = getattr(logging, (level or "INFO").upper(), logging.INFO)
    loggers = [logging.getLogger(name) for name in (LOGGER_NAME, PACKAGE_LOGGER_NAME)]

    if not _configured:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(format_string, datefmt=date_format))
        for logger in loggers:
            logger.handlers.clear()
            logger.addHandler(handler)
            logger.propagate = False
        _configured = True

    for logger in loggers:
        logger.setLevel(log_level)
        for handler in logger.handlers:
            handler.setLevel(log_level)

    library_level = logging.DEBUG if log_level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)

    return loggers[0]


def reset_logging() -> None:
    """Reset logging configuration (useful for testing)."""
    global _configured

    for name in (LOGGER_NAME, PACKAGE_LOGGER_NAME, *NOISY_LOGGERS):
        logger = logging.getLogger(name)
        logger.handlers.clear()
        logger.setLevel(logging.NOTSET)
        logger.propagate = True

    _configured = False
