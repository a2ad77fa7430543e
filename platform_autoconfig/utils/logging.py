"""
Logging helpers for platform-autoconfig.

Keeps the CLI, resolver and provisioning code on one configuration. Plain
standard library logging with a short console format by default, or JSON
lines when running under CI.

Usage:
    from platform_autoconfig.utils.logging import configure_logging, get_logger

    configure_logging(level="DEBUG")
    log = get_logger(__name__)
    log.info("starting containers", extra={"platform": "postgres"})
"""

from __future__ import annotations

import json
import logging
import logging.config
from typing import Any, Dict, Optional

# Record attributes copied into JSON payloads when present.
PROMOTED_FIELDS = ("platform", "db", "database_name", "docker_platform", "container")


def _json_formatter(record: logging.LogRecord) -> str:
    """Render a log record as a JSON string."""
    payload: Dict[str, Any] = {
        "level": record.levelname,
        "logger": record.name,
        "thread": record.threadName,
        "message": record.getMessage(),
    }
    for name in PROMOTED_FIELDS:
        value = getattr(record, name, None)
        if value is not None:
            payload[name] = value
    if record.exc_info:
        payload["exc_info"] = logging.Formatter().formatException(record.exc_info)
    if record.stack_info:
        payload["stack_info"] = record.stack_info
    return json.dumps(payload, default=str)


class JsonFormatter(logging.Formatter):
    """JSON lines formatter."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        return _json_formatter(record)


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """
    Configure the root logger.

    Parameters
    ----------
    level : str
        Logging level name (e.g. "DEBUG", "INFO").
    json_logs : bool
        Emit JSON lines instead of the console format.
    """
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "console": {
                    "format": "%(asctime)s | %(levelname)s | %(threadName)s | %(name)s"
                    " | %(message)s",
                    "datefmt": "%H:%M:%S",
                },
                "json": {"()": JsonFormatter},
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": "json" if json_logs else "console",
                    "level": level,
                }
            },
            "root": {"handlers": ["default"], "level": level},
        }
    )


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "JsonFormatter"]
