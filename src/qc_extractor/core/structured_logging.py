"""Structured logging for the QC extractor.

This module provides:
- Structured logging with correlation IDs
- Environment-aware formatting (JSON in production, readable in dev)
- Redaction of credentials and raw fragment text from log extras
"""

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Any

from pythonjsonlogger.json import JsonFormatter

from qc_extractor.core.config import get_settings
from qc_extractor.core.security_config import is_sensitive_key


# Context variable for correlation ID tracking across async calls
_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)

logger = logging.getLogger(__name__)

# Third-party loggers that flood debug output with HTTP chatter
NOISY_LOGGERS = ("httpx", "httpcore", "google_genai", "google.genai", "urllib3")


def get_correlation_id() -> str:
    """Get or create a correlation ID for tracing one bulk run."""
    correlation_id: str | None = _correlation_id_var.get()
    if correlation_id is None or correlation_id == "":
        new_id = str(uuid.uuid4())
        _correlation_id_var.set(new_id)
        return new_id
    return correlation_id


def set_correlation_id(correlation_id: str | None) -> None:
    """Set the correlation ID for the current context."""
    _correlation_id_var.set(correlation_id)


class StructuredLogger:
    """Structured logger that includes correlation IDs and sanitized data."""

    def __init__(self, logger_name: str):
        self.logger = logging.getLogger(logger_name)

    def _log_with_context(
        self,
        level: int,
        message: str,
        extra_data: dict[str, Any] | None = None,
        exc_info: bool = False,
    ) -> None:
        """Log with correlation ID and structured data."""
        correlation_id = get_correlation_id()
        sanitized_data = self._sanitize_data(extra_data or {})

        log_data = {
            "correlation_id": correlation_id,
            **sanitized_data,
        }

        if get_settings().ENVIRONMENT == "production":
            # Nested under one key so extras cannot clash with LogRecord attributes
            try:
                self.logger.log(
                    level,
                    message,
                    extra={"structured_data": log_data},
                    exc_info=exc_info,
                )
            except Exception as e:  # noqa: BLE001
                fallback_message = f"[{correlation_id}] {message} (logging failed: {e})"
                self.logger.log(level, fallback_message, exc_info=exc_info)
            return

        details = " ".join(f"{k}={v}" for k, v in sanitized_data.items())
        text = f"[{correlation_id}] {message}"
        if details:
            text = f"{text} | {details}"
        self.logger.log(
            level,
            text,
            extra={"structured_data": log_data},
            exc_info=exc_info,
        )

    def _sanitize_data(self, data: dict[str, Any]) -> dict[str, Any]:
        """Remove or mask sensitive data from log entries."""
        if not isinstance(data, dict) or not data:
            return {}

        sanitized: dict[str, Any] = {}
        for key, value in data.items():
            if is_sensitive_key(key):
                sanitized[key] = "[REDACTED]"
            else:
                sanitized[key] = self._sanitize_value(value)
        return sanitized

    def _sanitize_value(self, value: Any) -> Any:
        """Sanitize a single value which may be a dict, list, or primitive."""
        if isinstance(value, dict):
            return self._sanitize_data(value)
        if isinstance(value, list):
            return [self._sanitize_value(item) for item in value]
        return value

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug level message."""
        self._log_with_context(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info level message."""
        self._log_with_context(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning level message."""
        self._log_with_context(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        """Log error level message."""
        self._log_with_context(logging.ERROR, message, kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log exception with traceback."""
        self._log_with_context(logging.ERROR, message, kwargs, exc_info=True)


def setup_logging(verbose: bool = False) -> None:
    """Configure application logging; idempotent."""
    settings = get_settings()

    if verbose or settings.ENVIRONMENT == "development":
        log_level = logging.DEBUG
    else:
        log_level = logging.INFO
    root_logger = logging.getLogger()

    # Make setup idempotent - avoid duplicate handlers
    if root_logger.handlers:
        return

    formatter: logging.Formatter
    if settings.ENVIRONMENT == "production":
        formatter = JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            rename_fields={"asctime": "timestamp", "levelname": "level"},
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    handler.setLevel(log_level)

    root_logger.setLevel(log_level)
    root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
