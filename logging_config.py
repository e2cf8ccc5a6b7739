"""Logging setup: one stream handler whose lines carry row and load context."""

from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Any, Dict, Iterable

from settings import get_settings

# Attributes passed through ``extra=`` that are worth showing on a log line,
# in display order.
CONTEXT_KEYS = (
    "source",
    "row_number",
    "reason",
    "invalid_value",
    "reading_count",
    "month_count",
    "issue_count",
    "processing_ms",
    "status_code",
)

LOG_FORMAT = "%(asctime)sZ | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

_configured = False


class ContextualFormatter(logging.Formatter):
    """Formatter that appends ``key=value`` pairs for known context attributes."""

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        style: str = "%",
        context_keys: Iterable[str] | None = None,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt, style=style)
        self.context_keys = tuple(context_keys or CONTEXT_KEYS)

    def context_suffix(self, record: logging.LogRecord) -> str:
        pairs = (
            f"{key}={getattr(record, key)}"
            for key in self.context_keys
            if getattr(record, key, None) is not None
        )
        return " ".join(pairs)

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        suffix = self.context_suffix(record)
        return f"{message} | {suffix}" if suffix else message


def build_logging_config(level: str | int) -> Dict[str, Any]:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "contextual": {
                "()": ContextualFormatter,
                "fmt": LOG_FORMAT,
                "datefmt": DATE_FORMAT,
                "context_keys": list(CONTEXT_KEYS),
            }
        },
        "handlers": {
            "stderr": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "contextual",
            }
        },
        "root": {"handlers": ["stderr"], "level": level},
    }


def configure_logging(level: str | int | None = None, force: bool = False) -> None:
    """Install the contextual handler once; ``force`` re-applies it."""
    global _configured
    if _configured and not force:
        return

    dictConfig(build_logging_config(level if level is not None else get_settings().log_level))
    _configured = True
