"""Structured JSON logging for DebtDesk services."""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .config import get_settings
from .middleware import get_request_id

# Patterns for sensitive values that should never be logged
_SENSITIVE_PATTERNS = (
    re.compile(r"eyJ[a-zA-Z0-9_-]+\.[a-zA-Z0-9_-]+\.[a-zA-Z0-9_-]+", re.I),  # JWT tokens
    re.compile(r"password\s*=\s*[^\s]+", re.I),
    re.compile(r"\b\d{3}-\d{2}-\d{4}\b"),  # SSN
    re.compile(r"\b\d{4}[- ]?\d{4}[- ]?\d{4}[- ]?\d{4}\b"),  # card numbers
)

# Field names that indicate sensitive content
_SENSITIVE_FIELD_NAMES = frozenset(
    {
        "password",
        "secret",
        "token",
        "api_key",
        "apikey",
        "authorization",
        "credential",
    }
)

# Standard LogRecord attributes, never copied as extra fields
_STANDARD_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "taskName",
        "message",
        "request_id",
    }
)


def redact_sensitive(value: Any) -> Any:
    """Redact sensitive patterns from a string value."""
    if not isinstance(value, str):
        return value
    result = value
    for pattern in _SENSITIVE_PATTERNS:
        result = pattern.sub("[REDACTED]", result)
    return result


def _is_sensitive_key(key: str) -> bool:
    key_lower = key.lower()
    return any(s in key_lower for s in _SENSITIVE_FIELD_NAMES)


class JSONFormatter(logging.Formatter):
    """Format log records as structured JSON lines with sensitive value redaction."""

    def __init__(self, service_name: str, env: str) -> None:
        super().__init__()
        self.service_name = service_name
        self.env = env

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - inherited docstring
        request_id = get_request_id() or getattr(record, "request_id", None)

        log_record: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "service": self.service_name,
            "env": self.env,
            "msg": redact_sensitive(record.getMessage()),
        }

        # Only include request_id if present (avoid noise in the CLI)
        if request_id:
            log_record["request_id"] = request_id

        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                if _is_sensitive_key(key):
                    log_record[key] = "[REDACTED]"
                else:
                    log_record[key] = redact_sensitive(value)

        if record.exc_info:
            error_type = record.exc_info[0].__name__ if record.exc_info[0] else "Exception"
            log_record["error_type"] = error_type
            log_record["error_msg"] = redact_sensitive(str(record.exc_info[1]))

        return json.dumps(log_record, default=str, ensure_ascii=False)


def setup_logging(service_name: Optional[str] = None, level: Optional[str] = None) -> None:
    """
    Configure root logging with JSON output.

    Args:
        service_name: Service identifier for logs (default: DEBTDESK_SERVICE)
        level: Override log level (default: LOG_LEVEL)
    """
    settings = get_settings()

    handler = logging.StreamHandler()
    handler.setFormatter(
        JSONFormatter(
            service_name=service_name or settings.DEBTDESK_SERVICE,
            env=settings.environment,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level or settings.log_level)
    root_logger.addHandler(handler)

    # Silence noisy third-party loggers
    for noisy_logger in ("uvicorn.access", "httpx", "httpcore", "asyncio"):
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)
