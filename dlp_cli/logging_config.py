"""
Structured logging configuration using structlog.

Logs go to stderr so that stdout only carries command output.
"""

import logging
import os
import sys

import structlog

DEFAULT_LOG_LEVEL = "WARNING"


def _stderr_logger_factory(*_args: object) -> structlog.PrintLogger:
    # Resolved per logger so redirected stderr (pytest capture, pipes) is honored
    return structlog.PrintLogger(file=sys.stderr)


def setup_logging(level: str | None = None, json_logs: bool = False) -> None:
    """
    Configure structlog for the CLI.

    Sets up processors for:
    - Context variable merging
    - Log level addition
    - Exception info rendering
    - Timestamp addition
    - JSON or console rendering

    Args:
        level: Log level name (or DLP_LOG_LEVEL env var, default WARNING)
        json_logs: Render log lines as JSON instead of console text

    """
    level_name = (level or os.environ.get("DLP_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()
    numeric_level = logging.getLevelName(level_name)
    if not isinstance(numeric_level, int):
        numeric_level = logging.WARNING

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            (structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer(colors=False)),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=_stderr_logger_factory,
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a logger instance with the given name."""
    return structlog.get_logger(name)


def configure_default_logging() -> None:
    """
    Apply a quiet stderr configuration unless logging is already configured.

    Keeps library use of the SDK from writing log lines to stdout, which is
    structlog's own default.
    """
    if structlog.is_configured():
        return
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(logging.WARNING),
        logger_factory=_stderr_logger_factory,
        cache_logger_on_first_use=False,
    )


configure_default_logging()
