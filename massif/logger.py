"""structlog configuration shared by the CLI and library callers."""

from __future__ import annotations

import logging
import os
import sys
from typing import Any, Protocol

import structlog

ENV_LOG_LEVEL = "MASSIF_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"


class Logger(Protocol):
    """Leveled logging capability the core depends on."""

    def debug(self, event: str, **fields: Any) -> Any: ...

    def info(self, event: str, **fields: Any) -> Any: ...

    def warning(self, event: str, **fields: Any) -> Any: ...

    def error(self, event: str, **fields: Any) -> Any: ...


def resolve_log_level(log_level: str | None = None) -> int:
    if log_level is None:
        log_level = os.getenv(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL)
    return getattr(logging, log_level.strip().upper(), logging.WARNING)


def setup_logging(log_level: str | None = None, *, json_output: bool = False) -> None:
    numeric_level = resolve_log_level(log_level)

    logging.basicConfig(
        level=numeric_level,
        format="%(message)s",
        stream=sys.stderr,
    )
    # basicConfig is a no-op once handlers exist, so apply the level directly.
    logging.getLogger().setLevel(numeric_level)

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Logger:
    """Return a structlog logger, configuring stderr output if nobody has yet."""
    if not structlog.is_configured():
        setup_logging()
    return structlog.get_logger(name)
