"""JSON log output for the tessel loggers.

Every tessel logger is a child of the ``tessel`` package logger, which carries
the single JSON handler. Records are rendered one object per line:

    {"timestamp": ..., "level": ..., "logger": ..., "message": ...,
     "tessel": {"stream": ..., "component": ...}, <extras>, "exception": ...}

Routing fields passed via ``extra`` are grouped under ``"tessel"`` so log
pipelines can index them without knowing each record's other extras.
"""

import json
import logging
from datetime import UTC, datetime
from typing import Any

PACKAGE_LOGGER = "tessel"
COMPONENT_LOGGER = "tessel.component"

# Extras grouped under the "tessel" key
ROUTING_FIELDS = ("stream", "component", "message_type", "elapsed_ms")

# Attributes every LogRecord has, plus those a Formatter may add in place
_RECORD_ATTRIBUTES = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def record_extras(record: logging.LogRecord) -> dict[str, Any]:
    """Return the attributes set on ``record`` through ``extra``."""
    return {k: v for k, v in vars(record).items() if k not in _RECORD_ATTRIBUTES}


class JSONFormatter(logging.Formatter):
    """Render records as JSON lines stamped with their UTC creation time."""

    def format(self, record: logging.LogRecord) -> str:
        extras = record_extras(record)
        routing = {field: extras.pop(field) for field in ROUTING_FIELDS if field in extras}

        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if routing:
            entry["tessel"] = routing
        entry.update(extras)
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def configure_logging(level: int | None = None) -> logging.Logger:
    """Attach the JSON handler to the ``tessel`` package logger.

    Safe to call repeatedly: the handler is attached once. The package logger
    stops propagating so records are not duplicated by a root handler.

    Args:
        level: Level for the package logger; left unchanged if None.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    if not any(isinstance(h.formatter, JSONFormatter) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)
    if level is not None:
        logger.setLevel(level)
    logger.propagate = False
    return logger


def configure_component_logger(level: int = logging.INFO) -> logging.Logger:
    """Return the update-loop logger at ``level``, writing through the JSON handler.

    Components call this with their context's ``log_level``.
    """
    configure_logging()
    logger = logging.getLogger(COMPONENT_LOGGER)
    logger.setLevel(level)
    return logger
