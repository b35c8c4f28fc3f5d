"""JSON log lines for the dashboard and its shared helpers.

Each record is rendered as one JSON object: the process identity (service,
hostname, pid, environment) followed by whatever was passed through
``extra=``. Keys matching a redaction pattern are masked at any depth,
including inside lists.
"""

from __future__ import annotations

import json
import logging
import os
import socket
import traceback
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Iterable

from shared.constants import Environment

# Attributes every LogRecord carries; anything else came in through extra=.
_RESERVED_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime", "taskName"}

REDACTED = "[REDACTED]"


class SensitiveDataFilter:
    """Masks values whose key contains one of ``patterns`` (case-insensitive)."""

    def __init__(self, patterns: Iterable[str]):
        self.patterns = tuple(p.lower() for p in patterns)

    def is_sensitive(self, key: Any) -> bool:
        lowered = str(key).lower()
        return any(p in lowered for p in self.patterns)

    def filter(self, data: dict) -> dict:
        return {
            key: REDACTED if self.is_sensitive(key) else self._scrub(value)
            for key, value in data.items()
        }

    def _scrub(self, value: Any) -> Any:
        if isinstance(value, dict):
            return self.filter(value)
        if isinstance(value, (list, tuple)):
            return [self._scrub(v) for v in value]
        return value


def record_extras(record: logging.LogRecord) -> dict:
    return {k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS}


def _json_default(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def exception_payload(exc_info) -> dict:
    exc_type, exc, tb = exc_info
    return {
        "type": exc_type.__name__,
        "message": str(exc),
        "stack": traceback.format_tb(tb),
    }


class CustomJsonFormatter(logging.Formatter):
    def __init__(
        self,
        service: str,
        environment: str,
        redaction_patterns: Iterable[str],
    ):
        super().__init__()
        self.identity = {
            "service": service,
            "hostname": socket.gethostname(),
            "pid": os.getpid(),
            "environment": environment,
        }
        self.sensitive_filter = SensitiveDataFilter(redaction_patterns)

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        data = {
            "timestamp": created.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **self.identity,
            **record_extras(record),
        }
        if record.exc_info:
            data["exception"] = exception_payload(record.exc_info)
        return json.dumps(self.sensitive_filter.filter(data), default=_json_default)


class PlainFormatter(logging.Formatter):
    """Human readable single-line output for local development."""

    def __init__(self):
        super().__init__("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = record_extras(record)
        if extras:
            line += " " + " ".join(f"{k}={v}" for k, v in extras.items())
        return line


def build_formatter(
    service: str, environment: str, redaction_patterns: Iterable[str]
) -> logging.Formatter:
    if Environment.is_development(environment):
        return PlainFormatter()
    return CustomJsonFormatter(service, environment, redaction_patterns)


def configure_logging(
    service: str,
    environment: str,
    level: str,
    redaction_patterns: Iterable[str],
) -> logging.Logger:
    """Install one stderr handler on the root logger, replacing any others."""
    handler = logging.StreamHandler()
    handler.setFormatter(build_formatter(service, environment, redaction_patterns))
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return root


__all__ = [
    "CustomJsonFormatter",
    "PlainFormatter",
    "SensitiveDataFilter",
    "build_formatter",
    "configure_logging",
]
