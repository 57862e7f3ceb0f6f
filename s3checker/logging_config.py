"""Logging configuration for s3checker.

Provides a JSON formatter for structured logs and a readable plain
formatter for interactive use. Logs go to stderr so the report written to
stdout is never interleaved with diagnostics.
"""
from __future__ import annotations
import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

DEFAULT_LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING").upper()
LOG_FORMAT = os.getenv("LOG_FORMAT", "text").lower()  # 'json' or 'text'
SERVICE_NAME = os.getenv("SERVICE_NAME", "s3checker")

# Loggers that emit request/response and signing detail at DEBUG
AWS_SDK_LOGGERS = ("boto3", "botocore", "s3transfer", "urllib3")


class JsonFormatter(logging.Formatter):
    """Minimal JSON log formatter.

    Adds contextual extras (error_type, context) if present on the record.
    """

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        log: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "service": SERVICE_NAME,
        }

        for attr in ("error_type", "stack_info", "exc_info", "context"):
            value = getattr(record, attr, None)
            if value:
                if attr == "exc_info" and isinstance(value, tuple):
                    log["exception"] = self.formatException(value)  # type: ignore[arg-type]
                else:
                    log[attr] = value
        return json.dumps(log, ensure_ascii=False, default=str)


class StderrHandler(logging.StreamHandler):
    """StreamHandler bound to whatever sys.stderr is at emit time."""

    def __init__(self):
        logging.Handler.__init__(self)

    @property
    def stream(self):
        return sys.stderr


def _build_formatter(fmt: str) -> logging.Formatter:
    if fmt == "json":
        return JsonFormatter()
    return logging.Formatter(
        fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> logging.Logger:
    """Idempotent logging setup used by the CLI entrypoint.

    The handler is attached once; level and formatter are refreshed on every
    call so a later call with validated settings wins over the env defaults.
    """
    root = logging.getLogger()
    handler = next((h for h in root.handlers if isinstance(h, StderrHandler)), None)
    if handler is None:
        handler = StderrHandler()
        root.addHandler(handler)
    handler.setFormatter(_build_formatter((fmt or LOG_FORMAT).lower()))
    root.setLevel((level or DEFAULT_LOG_LEVEL).upper())
    return root


def enable_sdk_debug_logging() -> None:
    """Turn on verbose request, response and signing logs from the AWS SDK."""
    for name in AWS_SDK_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG)


__all__ = ["setup_logging", "enable_sdk_debug_logging", "JsonFormatter"]
