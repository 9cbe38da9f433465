"""Logging for the metrics service: JSON lines in production, plain text in dev."""

import json
import logging
import sys
from datetime import datetime, timezone

# Attributes passed via `extra={...}` that are copied into JSON records.
CONTEXT_FIELDS = ("driver_id", "period")


class JSONFormatter(logging.Formatter):
    """One JSON object per line; the message is escaped by json.dumps."""

    def __init__(self, environment: str = "development"):
        super().__init__()
        self.environment = environment

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "service_name": "rideshare-metrics",
            "environment": self.environment,
        }
        for field in CONTEXT_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, default=str)


class DevFormatter(logging.Formatter):
    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s [%(levelname)8s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def setup_logging(
    level: str = "INFO",
    json_output: bool = False,
    environment: str = "development",
) -> None:
    """Replace root handlers with a single stdout handler."""
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter(environment) if json_output else DevFormatter())

    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # SQL echo and request-body parsing are too chatty below WARNING
    for noisy in ("sqlalchemy.engine", "httpx", "multipart"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
