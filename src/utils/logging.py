"""Structured JSON logging configuration."""

import json
import logging
from datetime import datetime, timezone
from typing import Dict, Any

# Standard LogRecord attributes that should not be included as extra fields
_STANDARD_ATTRS = {
    'name', 'msg', 'args', 'created', 'filename', 'funcName', 'levelname',
    'levelno', 'lineno', 'module', 'msecs', 'message', 'pathname',
    'process', 'processName', 'relativeCreated', 'thread', 'threadName',
    'exc_info', 'exc_text', 'stack_info', 'taskName', 'color_message', 'asctime'
}


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    # logger.info("message", extra={"userId": "123"}) sets userId on the record
    return {
        key: value for key, value in record.__dict__.items()
        if key not in _STANDARD_ATTRS and not callable(value)
    }


class JSONFormatter(logging.Formatter):
    """Format log records as JSON for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        log_data.update(_extra_fields(record))
        return json.dumps(log_data, default=str)


class DevFormatter(logging.Formatter):
    """Compact human-readable lines for local development."""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)-7s %(name)s: %(message)s", datefmt="%H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = _extra_fields(record)
        if extras:
            line += " " + " ".join(f"{k}={v}" for k, v in extras.items())
        return line


def setup_logging(environment: str = "production", level: str = "INFO"):
    """Configure application logging.

    JSON lines everywhere except development, which gets readable text.
    Uvicorn's access log is reduced to warnings since requests are logged
    by RequestLoggingMiddleware.
    """
    handler = logging.StreamHandler()
    handler.setFormatter(DevFormatter() if environment == "development" else JSONFormatter())
    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())
    root_logger.handlers = [handler]

    uvicorn_access = logging.getLogger("uvicorn.access")
    uvicorn_access.handlers = [handler]
    uvicorn_access.setLevel(logging.WARNING)
