"""structlog setup shared by the library and the ``market-cma`` command."""

from __future__ import annotations

import logging
import sys
from collections.abc import MutableMapping
from typing import Any

import structlog
from structlog.types import Processor

LOG_LEVELS: dict[str, int] = {
    "critical": logging.CRITICAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

# Event keys whose values must never reach a log sink.
SECRET_KEYS = frozenset({"api_key", "gemini_api_key", "key"})
REDACTED = "***"

# Third-party loggers that are noisy at DEBUG (font discovery, connection pool chatter).
QUIET_LOGGERS = ("matplotlib", "PIL", "urllib3")


def redact_secrets(
    _logger: Any, _method: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Mask credential values bound to an event."""
    for name in SECRET_KEYS.intersection(event_dict):
        if event_dict[name]:
            event_dict[name] = REDACTED
    return event_dict


def configure_logging(
    level: str = "warning",
    *,
    json_output: bool = False,
) -> None:
    """Route structlog events through stdlib logging on stderr at ``level``."""

    normalized = level.lower()
    if normalized not in LOG_LEVELS:
        valid = ", ".join(sorted(LOG_LEVELS))
        raise ValueError(f"Unsupported log level {level!r}. Choose one of: {valid}.")
    threshold = LOG_LEVELS[normalized]

    logging.basicConfig(level=threshold, format="%(message)s", stream=sys.stderr)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(threshold, logging.INFO))

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        redact_secrets,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
    ]
    if json_output:
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(threshold),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


__all__ = ["LOG_LEVELS", "configure_logging", "redact_secrets"]
