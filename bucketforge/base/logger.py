"""
Structured logging for Bucketforge.

Provides a pre-configured logger that emits JSON-structured log records
with convergence context (platform, bucket, operation, ...) for easy
filtering in log aggregation tools.
"""

from __future__ import annotations

import json
import logging
import uuid
from typing import Any

CONTEXT_KEYS = ("request_id", "platform", "bucket", "operation", "region", "project", "owner")


class StructuredFormatter(logging.Formatter):
    """Emit log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        # Attach any extras injected via BucketforgeLogger.log_operation
        for key in CONTEXT_KEYS:
            val = getattr(record, key, None)
            if val is not None:
                log_entry[key] = val
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = str(record.exc_info[1])
        return json.dumps(log_entry)


class BucketforgeLogger:
    """Convenience wrapper around :mod:`logging` carrying bound context.

    ``bind`` returns a new logger whose records always include the given
    context, so a convergence pass can tag every line with its bucket.
    """

    def __init__(self, name: str = "bucketforge", context: dict[str, Any] | None = None) -> None:
        self.logger = logging.getLogger(name)
        self.context: dict[str, Any] = dict(context or {})
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(StructuredFormatter())
            self.logger.addHandler(handler)
            self.logger.setLevel(logging.INFO)

    def bind(self, **context: Any) -> BucketforgeLogger:
        """Return a child logger with *context* merged into the bound fields."""
        return BucketforgeLogger(self.logger.name, {**self.context, **context})

    def log_operation(
        self,
        level: int,
        message: str,
        *,
        exc_info: bool = False,
        **context: Any,
    ) -> None:
        """Emit a structured log record with convergence context.

        Args:
            level: Logging level (e.g. logging.INFO).
            message: Human-readable message.
            exc_info: Whether to include exception info.
            **context: Fields from ``CONTEXT_KEYS`` (bucket, operation, ...);
                ``request_id`` is auto-generated if omitted.
        """
        extra = {**self.context, **context}
        extra.setdefault("request_id", uuid.uuid4().hex[:12])
        self.logger.log(level, message, extra=extra, exc_info=exc_info)

    def info(self, message: str, **kwargs: Any) -> None:
        self.log_operation(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self.log_operation(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self.log_operation(logging.ERROR, message, **kwargs)

    def debug(self, message: str, **kwargs: Any) -> None:
        self.log_operation(logging.DEBUG, message, **kwargs)


# Module-level singleton
bf_logger = BucketforgeLogger()
