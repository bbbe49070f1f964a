"""
webui_operator.core.logging_config - structlog Setup
=====================================================

Every component receives its logger explicitly (constructor argument) and
falls back to the shared structlog logger bound with its component name.
Tests inject nothing and read output through ``structlog.testing.capture_logs``.

configure_logging() is called once at process bootstrap (see handlers.py).
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import structlog

from webui_operator.core.config import OperatorConfig


def component_logger(component: str, logger: Optional[Any] = None) -> Any:
    """Return `logger` (or the shared structlog logger) bound to `component`."""
    base = logger if logger is not None else structlog.get_logger()
    return base.bind(component=component)


def configure_logging(config: OperatorConfig) -> None:
    """Configure structlog's processor chain and level filter.

    Args:
        config: Supplies log_level and log_format ("console" or "json").
    """
    level = getattr(logging, config.log_level.upper(), logging.INFO)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if config.log_format == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=False,
    )
