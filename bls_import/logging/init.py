from __future__ import annotations

import logging
import sys
from typing import TextIO

"""Console logging for the importer.

All CLI output is a log line ``LABEL message`` on stdout, where LABEL is one
of INFO, WARN, ERROR, SUMMARY (and DEBUG with ``--debug``). Library modules
only call ``logging.getLogger(__name__)``; everything under the
``bls_import`` namespace ends up on the one handler installed here.
"""

__all__ = [
    "LOGGER_NAME",
    "SUMMARY_LEVEL",
    "LabeledFormatter",
    "setup_logging",
    "get_logger",
    "set_debug",
    "log_summary",
    "reset_logging",
]

LOGGER_NAME = "bls_import"

# between INFO (20) and WARNING (30)
SUMMARY_LEVEL = 25

_LABELS = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    SUMMARY_LEVEL: "SUMMARY",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "CRITICAL",
}

_app_logger: logging.Logger | None = None


class LabeledFormatter(logging.Formatter):
    """``LABEL message``; DEBUG lines also name the emitting module."""

    def format(self, record: logging.LogRecord) -> str:
        label = _LABELS.get(record.levelno, record.levelname)
        message = record.getMessage()
        if record.levelno <= logging.DEBUG:
            origin = record.name.removeprefix(LOGGER_NAME + ".")
            return f"{label} [{origin}] {message}"
        return f"{label} {message}"


def setup_logging(stream: TextIO | None = None) -> logging.Logger:
    """Install the stdout handler on the ``bls_import`` logger once.

    Later calls return the same logger untouched; call reset_logging() first
    to rebind the stream (tests capturing stdout do this).
    """
    global _app_logger
    if _app_logger is not None:
        return _app_logger

    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")
    app_logger = logging.getLogger(LOGGER_NAME)
    for stale in list(app_logger.handlers):
        app_logger.removeHandler(stale)

    console = logging.StreamHandler(stream if stream is not None else sys.stdout)
    console.setFormatter(LabeledFormatter())
    console.setLevel(logging.INFO)
    app_logger.addHandler(console)
    app_logger.setLevel(logging.INFO)
    # stdout is the CLI contract; the root logger must not print a second copy
    app_logger.propagate = False

    _app_logger = app_logger
    return app_logger


def get_logger() -> logging.Logger:
    return _app_logger if _app_logger is not None else setup_logging()


def set_debug(enabled: bool = True) -> None:
    level = logging.DEBUG if enabled else logging.INFO
    app_logger = get_logger()
    app_logger.setLevel(level)
    for handler in app_logger.handlers:
        handler.setLevel(level)


def log_summary(message: str) -> None:
    get_logger().log(SUMMARY_LEVEL, message)


def reset_logging() -> None:
    """Detach the handler and forget the configured logger (tests)."""
    global _app_logger
    app_logger = logging.getLogger(LOGGER_NAME)
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
    app_logger.setLevel(logging.NOTSET)
    app_logger.propagate = True
    _app_logger = None
