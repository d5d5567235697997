"""JSON-lines logging for client resolution and webhook handling.

Two loggers are wired up here. ``twilio_client.audit`` records which
credential mode each request resolved and why webhooks were rejected.
``twilio.http_client`` carries the SDK's request and response lines, which
each client enables through ``Twilio:Client:LogLevel``.

Secrets are never passed to either logger. Account and key SIDs are masked
before they reach ``audit_data``.
"""

import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone

from fastapi_twilio_client.clients.http import TRANSPORT_LOGGER_NAME
from fastapi_twilio_client.config.settings import get_settings

AUDIT_LOGGER_NAME = "twilio_client.audit"

# Set per request by the middleware in main.py
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class JSONFormatter(logging.Formatter):
    """One JSON object per line, with the current request id attached."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": request_id_var.get(""),
        }
        audit_data = getattr(record, "audit_data", None)
        if audit_data:
            entry.update(audit_data)
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _json_handlers(log_file: str) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    formatter = JSONFormatter()
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def setup_logging() -> None:
    """Attach JSON handlers to the audit and transport loggers.

    The audit level comes from LOG_LEVEL. The transport logger keeps no level
    of its own so each client's LogLevel decides what it emits.
    """
    settings = get_settings()

    audit = logging.getLogger(AUDIT_LOGGER_NAME)
    audit.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    audit.handlers.clear()
    for handler in _json_handlers(settings.log_file):
        audit.addHandler(handler)
    audit.propagate = False

    transport = logging.getLogger(TRANSPORT_LOGGER_NAME)
    transport.handlers.clear()
    for handler in _json_handlers(settings.log_file):
        transport.addHandler(handler)


def get_audit_logger() -> logging.Logger:
    return logging.getLogger(AUDIT_LOGGER_NAME)


def generate_request_id() -> str:
    return uuid.uuid4().hex[:12]
