"""Logging setup"""

import json
import logging
import logging.config
import os
from datetime import datetime, timezone

from .config import Settings


SECURITY_LOGGER = "events_api.security"

# Attributes every LogRecord carries; anything else was passed via ``extra``
_RESERVED_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """One JSON object per line, with ``extra`` fields merged in."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(settings: Settings) -> None:
    """Configure root logging from settings."""
    formatter = "json" if settings.LOG_JSON else "console"
    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": formatter,
        },
    }

    if settings.LOG_DIR:
        os.makedirs(settings.LOG_DIR, exist_ok=True)
        for name, level in (("combined", settings.LOG_LEVEL), ("error", "ERROR")):
            handlers[name] = {
                "class": "logging.handlers.RotatingFileHandler",
                "filename": os.path.join(settings.LOG_DIR, f"{name}.log"),
                "maxBytes": 20 * 1024 * 1024,
                "backupCount": 14,
                "level": level,
                "formatter": "json",
                "encoding": "utf-8",
            }

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {"format": "%(asctime)s %(levelname)s [%(name)s] %(message)s"},
            "json": {"()": JsonFormatter},
        },
        "handlers": handlers,
        "root": {"level": settings.LOG_LEVEL, "handlers": list(handlers)},
        "loggers": {
            "uvicorn.access": {"level": "WARNING"},
        },
    })


def get_security_logger() -> logging.Logger:
    """Logger for audit and security events"""
    return logging.getLogger(SECURITY_LOGGER)
