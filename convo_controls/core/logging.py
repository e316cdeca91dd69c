"""Logging configuration for dialog controls.

This module sets up a structured logging configuration using
``logging.config.dictConfig`` and exposes a context manager that binds the
current turn ID so it is included in every log record emitted while a turn is
being processed. Log output uses key-value formatting to facilitate downstream
parsing.
"""

from __future__ import annotations

import logging
import logging.config
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

from ..settings import get_settings

# ---------------------------------------------------------------------------
# Context variable used to propagate per-turn IDs to log records
# ---------------------------------------------------------------------------
turn_id_ctx_var: ContextVar[str | None] = ContextVar("turn_id", default=None)


class TurnIdFilter(logging.Filter):
    """Inject the turn ID from contextvars into log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.turn_id = turn_id_ctx_var.get() or "-"
        return True


def _build_config(log_level: str) -> dict[str, Any]:
    """Build logging configuration dictionary."""

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"turn_id": {"()": TurnIdFilter}},
        "formatters": {
            "kv": {
                "format": (
                    "level=%(levelname)s logger=%(name)s turn_id=%(turn_id)s "
                    "message=%(message)s"
                )
            }
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stdout",
                "formatter": "kv",
                "filters": ["turn_id"],
                "level": log_level,
            }
        },
        "root": {"handlers": ["default"], "level": log_level},
    }


def setup_logging(log_level: str | None = None) -> None:
    """Configure root logging using key-value formatting.

    The level defaults to the ``LOG_LEVEL`` setting.
    """

    level = (log_level or get_settings().log_level).upper()
    logging.config.dictConfig(_build_config(level))


@contextmanager
def turn_scope(turn_id: str) -> Iterator[str]:
    """Bind ``turn_id`` to log records for the duration of the block."""
    token = turn_id_ctx_var.set(turn_id)
    try:
        yield turn_id
    finally:
        turn_id_ctx_var.reset(token)


__all__ = ["TurnIdFilter", "setup_logging", "turn_id_ctx_var", "turn_scope"]
