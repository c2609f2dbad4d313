"""Logging setup and request-id propagation."""

from __future__ import annotations

import logging
import logging.config
from contextvars import ContextVar
from typing import Literal

request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)


class RequestIdFilter(logging.Filter):
    """Stamp every record with the id of the request being handled."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = request_id_var.get() or "-"
        return True


def configure_logging(
    level: str = "INFO",
    fmt: Literal["plain", "json"] = "plain",
) -> None:
    """Apply the process-wide logging configuration.

    ``json`` emits one object per line through python-json-logger; extra
    fields passed via ``extra=`` land as top-level keys.
    """
    formatters = {
        "plain": {
            "format": "%(asctime)s %(levelname)s [%(name)s] [%(request_id)s] %(message)s",
        },
        "json": {
            "()": "pythonjsonlogger.json.JsonFormatter",
            "format": "%(asctime)s %(name)s %(levelname)s %(request_id)s %(message)s",
        },
    }
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {"request_id": {"()": RequestIdFilter}},
            "formatters": formatters,
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": fmt,
                    "filters": ["request_id"],
                    "stream": "ext://sys.stdout",
                }
            },
            "root": {"handlers": ["console"], "level": level.upper()},
        }
    )
