from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from pathlib import Path

LOGGER_NAME = "llmify"

_LOGGING_CONFIGURED = False


def setup_logging(
    filename: str | Path | None = None,
    *,
    verbose: bool = False,
) -> structlog.stdlib.BoundLogger:
    """Set up structured logging for the llmify package.

    structlog is configured once per process. Later calls only adjust what can
    change between invocations: the level of the `llmify` logger (DEBUG when
    `verbose`, INFO otherwise) and, when `filename` is given, an extra file
    handler.

    Args:
        filename: Optional path to a log file. If None, logs are written to stderr.
        verbose: Emit per-entry include/exclude diagnostics.

    Returns:
        A structlog logger instance configured for the llmify package.
    """
    global _LOGGING_CONFIGURED  # noqa: PLW0603
    std_logger = logging.getLogger(LOGGER_NAME)
    if not _LOGGING_CONFIGURED:
        handler: logging.Handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(message)s"))
        std_logger.addHandler(handler)
        std_logger.propagate = False
        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        _LOGGING_CONFIGURED = True

    if filename:
        file_handler = logging.FileHandler(str(filename), encoding="utf-8")
        file_handler.setFormatter(logging.Formatter("%(message)s"))
        for existing in list(std_logger.handlers):
            if isinstance(existing, logging.FileHandler):
                std_logger.removeHandler(existing)
                existing.close()
        std_logger.addHandler(file_handler)

    std_logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    return structlog.get_logger(LOGGER_NAME)


logger = setup_logging()
