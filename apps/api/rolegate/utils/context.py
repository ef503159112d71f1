"""
Request context and log configuration.

The request ID lives in a context variable so any log line emitted while
handling a request can be correlated with it.

Usage:
    # At startup
    configure_logging(settings.log_level, settings.log_format)

    # Anywhere
    logger = structlog.get_logger()
    logger.info("Ability registry loaded", roles=["admin", "guest"])
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from typing import Any

import structlog

# Request-scoped context using contextvars (async-safe)
_request_id: ContextVar[str] = ContextVar("request_id", default="")


def get_request_id() -> str:
    """Get current request ID from context."""
    return _request_id.get()


def set_request_id(request_id: str) -> Any:
    """Set the request ID; returns a token for reset_request_id."""
    return _request_id.set(request_id)


def reset_request_id(token: Any) -> None:
    _request_id.reset(token)


# ============================================================
# STRUCTLOG
# ============================================================

def add_request_context(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Structlog processor that adds the request ID to every log line."""
    request_id = get_request_id()
    if request_id:
        event_dict["request_id"] = request_id
    return event_dict


def configure_logging(level: str = "INFO", log_format: str = "json") -> None:
    """
    Configure stdlib logging and structlog.

    Args:
        level: Log level name (DEBUG, INFO, ...)
        log_format: "json" for machine-readable output, "text" for the console
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)

    renderer: Any
    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_request_context,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=True,
    )
