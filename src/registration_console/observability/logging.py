"""Centralized logging setup for the Registration Console."""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Optional


# Third-party loggers that are too chatty at INFO for a console session.
NOISY_LOGGERS = ("httpx", "httpcore", "urllib3", "uvicorn.access")


class JsonFormatter(logging.Formatter):
    """Logging formatter that renders each record as one JSON line."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # Attributes every LogRecord carries are not treated as extra fields.
        dummy_record = logging.LogRecord(
            "name", logging.INFO, "path", 1, "msg", None, None
        )
        self._reserved_attrs = set(dummy_record.__dict__.keys())
        self._reserved_attrs.update({"message", "asctime", "stack_info"})

    def format(self, record: logging.LogRecord) -> str:
        """Formats a log record as a JSON string."""
        log_entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "component": record.name,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        # Fields passed as extra={"extra_fields": {...}} are merged flat; any
        # other custom attribute is copied under its own name.
        for key, value in record.__dict__.items():
            if key in self._reserved_attrs:
                continue
            if key == "extra_fields" and isinstance(value, dict):
                log_entry.update(value)
            else:
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


def setup_logging(level: Optional[str] = None):
    """Initializes the logging system.

    Args:
        level: Optional log level override. Defaults to LOG_LEVEL env var or INFO.
    """
    log_level = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()

    logger = logging.getLogger()
    logger.setLevel(log_level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())

    # Remove existing handlers to avoid duplicates
    for h in logger.handlers[:]:
        logger.removeHandler(h)

    logger.addHandler(handler)

    if logging.getLevelName(log_level) != logging.DEBUG:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


class ContextLogger(logging.LoggerAdapter):
    """Adds fixed context fields, such as a session id, to every record.

    The context is merged into ``extra_fields`` so it comes out flat in the
    JSON line; fields passed at the call site win over the bound ones.
    """

    def process(self, msg, kwargs):
        extra = dict(kwargs.get("extra") or {})
        extra["extra_fields"] = {
            **self.extra,
            **(extra.get("extra_fields") or {}),
        }
        kwargs["extra"] = extra
        return msg, kwargs

    def bind(self, **context: Any) -> "ContextLogger":
        return ContextLogger(self.logger, {**self.extra, **context})


def get_logger(name: str, **context: Any):
    """Retrieves a logger with the given name.

    Args:
        name: The name of the logger (typically __name__).
        **context: Fields attached to every record, e.g. ``session_id``.

    Returns:
        A logging.Logger, or a ContextLogger when context is given.
    """
    logger = logging.getLogger(name)
    if context:
        return ContextLogger(logger, context)
    return logger
