"""
Structured logging configuration.

Every module logs through a child of the "savings_ledger" logger.
Records are written as one JSON object per line so they can be
shipped to a log aggregator without further parsing.
"""

import json
import logging
from datetime import datetime, timezone

ROOT_LOGGER = "savings_ledger"

# Fields that callers may attach through logging's `extra=` argument
CONTEXT_FIELDS = ("user_id", "account_id", "transaction_id", "event", "code")


class JSONFormatter(logging.Formatter):
    """Render a log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                entry[field] = value

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def setup_logging(level: str = "INFO") -> logging.Logger:
    """
    Attach a JSON stream handler to the application logger.

    Safe to call more than once: existing handlers are replaced
    rather than duplicated.
    """
    logger = logging.getLogger(ROOT_LOGGER)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter())
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a logger namespaced under the application logger."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
