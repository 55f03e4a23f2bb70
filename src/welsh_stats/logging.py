"""structlog setup for the welsh-stats command line and library code."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

import structlog
from structlog.types import Processor

LOG_LEVELS: dict[str, int] = {
    "critical": logging.CRITICAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


def resolve_level(level: str) -> int:
    """Translate a level name such as ``"Info"`` into its ``logging`` constant."""
    normalized = level.strip().lower()
    try:
        return LOG_LEVELS[normalized]
    except KeyError:
        valid = ", ".join(sorted(LOG_LEVELS))
        raise ValueError(f"Unsupported log level {level!r}. Choose one of: {valid}.") from None


def configure_logging(
    level: str = "warning",
    *,
    json_output: bool = False,
    stream: TextIO | None = None,
) -> None:
    """Route structlog events to ``stream`` (stderr by default).

    Logs never go to stdout because stdout carries the report or JSON document.
    """

    level_value = resolve_level(level)
    target = stream if stream is not None else sys.stderr

    logging.basicConfig(level=level_value, format="%(message)s", stream=target, force=True)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
    ]
    renderer: Processor
    if json_output:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level_value),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


__all__ = ["configure_logging", "resolve_level", "LOG_LEVELS"]
