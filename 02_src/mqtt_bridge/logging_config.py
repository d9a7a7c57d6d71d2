"""Structured logging configuration for the MQTT bridge."""

import json
import logging
import logging.config
import logging.handlers
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .config import DEFAULT_LOG_PATH
from .errors import BridgeError

# Third-party loggers that only matter when they complain
NOISY_LOGGERS = [
    "aiosqlite",
    "httpx",
    "httpcore",
    "uvicorn.access",
]


class JSONFormatter(logging.Formatter):
    """
    One JSON object per line.

    Bridge-level fields passed through `extra` (topic, query_id, sequence,
    entity_id, ...) are lifted to the top level so traffic for one topic or
    query can be grepped directly. BridgeError context is attached to the
    exception entry.
    """

    EXTRA_FIELDS = [
        "topic",
        "query_id",
        "sequence",
        "entity_id",
        "entity_type",
        "operation",
        "source_id",
        "reaction_id",
    ]

    @staticmethod
    def _component(logger_name: str) -> str | None:
        # mqtt_bridge.reaction.reaction -> reaction
        parts = logger_name.split(".")
        if parts[0] == "mqtt_bridge" and len(parts) > 1:
            return parts[1]
        return None

    def _inject_exception(self, log_data: dict[str, Any], record: logging.LogRecord) -> None:
        if not record.exc_info:
            return

        exc_type, exc_value, _ = record.exc_info
        entry = {
            "type": exc_type.__name__ if exc_type else None,
            "message": str(exc_value) if exc_value else None,
            "stacktrace": self.formatException(record.exc_info),
        }
        if isinstance(exc_value, BridgeError) and exc_value.context:
            entry["context"] = exc_value.context
        log_data["exception"] = entry

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        component = self._component(record.name)
        if component:
            log_data["component"] = component

        if record.levelno >= logging.ERROR or record.levelno == logging.DEBUG:
            log_data["file"] = f"{record.filename}:{record.lineno}"
            log_data["function"] = record.funcName

        for field in self.EXTRA_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_data[field] = value

        # Per-message context passed via extra={"context": {...}}
        if hasattr(record, "context"):
            log_data["context"] = record.context

        self._inject_exception(log_data, record)

        return json.dumps(log_data, default=str, ensure_ascii=False)


def setup_logging(
    log_level: str | None = None,
    log_file: str | None = None,
    suppress_noisy: bool = True,
) -> None:
    """
    Setup structured logging for the bridge process.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
                   Defaults to LOG_LEVEL env var or INFO.
        log_file: Path to log file. Defaults to LOG_FILE env var or
                  04_logs/app.log.
        suppress_noisy: Raise database and HTTP client loggers to WARNING.
    """
    if log_level is None:
        log_level = os.getenv("LOG_LEVEL", "INFO")

    if log_file is None:
        log_file = os.getenv("LOG_FILE") or str(DEFAULT_LOG_PATH)

    Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    loggers = {}
    if suppress_noisy:
        loggers = {name: {"level": "WARNING"} for name in NOISY_LOGGERS}

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {"()": "mqtt_bridge.logging_config.JSONFormatter"},
            },
            "handlers": {
                "file": {
                    "class": "logging.handlers.RotatingFileHandler",
                    "filename": log_file,
                    "maxBytes": 10 * 1024 * 1024,
                    "backupCount": 5,
                    "formatter": "json",
                    "encoding": "utf-8",
                },
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "json",
                    "stream": "ext://sys.stdout",
                },
            },
            "loggers": loggers,
            "root": {
                "level": log_level.upper(),
                "handlers": ["file", "console"],
            },
        }
    )


def get_logger(name: str) -> logging.Logger:
    """Get a module logger (pass __name__)."""
    return logging.getLogger(name)
