"""
Logging setup (structured JSON).

Library modules only create module loggers; the process that hosts the
service calls ``configure_logging`` once.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

# Extra fields engine modules attach to their records
EXTRA_FIELDS = (
    "case_id",
    "from_stage",
    "to_stage",
    "transition_kind",
    "error_code",
    "duration_ms",
)


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in EXTRA_FIELDS:
            if hasattr(record, name):
                log_entry[name] = getattr(record, name)
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def configure_logging(level: str = "INFO", log_format: str = "json") -> logging.Logger:
    """
    Attach a single stream handler to the ``convivencia`` logger.

    Calling it again replaces the handler instead of stacking a new one.
    """
    logger = logging.getLogger("convivencia")
    logger.setLevel(getattr(logging, level.upper()))

    handler = logging.StreamHandler()
    if log_format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )

    for existing in list(logger.handlers):
        if getattr(existing, "_convivencia", False):
            logger.removeHandler(existing)
    handler._convivencia = True
    logger.addHandler(handler)
    return logger
