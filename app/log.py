# =============================================================================
# Logging Configuration
# =============================================================================
#
# Modules log through `logging.getLogger(__name__)`; this module wires the
# root logger once at startup. Two output formats:
#   - console: "2026-01-01 12:00:00 | INFO | app.api.records | message"
#   - json:    one JSON object per line (for log shippers)
#
# USAGE:
#   from app.log import configure_logging
#   configure_logging(level="DEBUG", json_logs=False)
# =============================================================================

from __future__ import annotations

import json
import logging
import logging.config
from typing import Any

# Attributes every LogRecord carries; anything else came in via `extra=`.
_STANDARD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Render each record as a single JSON line, including `extra` fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """
    Configure the root logger.

    Safe to call more than once (e.g., app factory invoked per test); the
    last call wins. Uvicorn's own loggers are left propagating so access
    and error lines share the same format.
    """
    formatter_name = "json" if json_logs else "console"

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "console": {
                    "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
                "json": {"()": JsonFormatter},
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": formatter_name,
                    "level": level.upper(),
                },
            },
            "root": {"handlers": ["default"], "level": level.upper()},
        }
    )
