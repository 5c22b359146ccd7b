"""Structured Logger with JSON Formatting.

Provides structured logging with JSON output for machine-readable logs.
"""

import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from speedboard.lib.distributed_tracing import get_correlation_id

# Context fields copied from `extra` onto the JSON line when present
CONTEXT_FIELDS = (
    'endpoint',
    'method',
    'status_code',
    'duration_ms',
    'url',
    'strategy',
    'database_id',
    'upstream_status',
    'limit',
    'result_count',
)

# Never written to logs, whatever the caller passes
SENSITIVE_KEYS = ('key', 'api_key', 'password', 'token', 'database_url')


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')


def _strip_sensitive(entry: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in entry.items() if k not in SENSITIVE_KEYS}


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON-formatted log string
        """
        log_data = {
            'timestamp': _utc_timestamp(),
            'level': record.levelname,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'request_id': get_correlation_id(),
        }

        for field in CONTEXT_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        if record.exc_info:
            log_data['exception'] = {
                'type': record.exc_info[0].__name__ if record.exc_info[0] else None,
                'message': str(record.exc_info[1]) if record.exc_info[1] else None,
            }

        return json.dumps(log_data, default=str)


class StructuredLogger:
    """Structured logger with JSON formatting.

    Usage:
        logger = StructuredLogger(__name__)
        logger.info('PageSpeed request', url='https://example.com/', strategy='mobile')
        logger.error('Failed to save lighthouse score', exc_info=True)
    """

    def __init__(self, name: str):
        """Initialize structured logger.

        Args:
            name: Logger name (typically module name)
        """
        self.logger = logging.getLogger(name)

        log_level = os.getenv('LOG_LEVEL', 'INFO').upper()
        self.logger.setLevel(getattr(logging, log_level, logging.INFO))

        # Remove existing handlers to avoid duplicates
        self.logger.handlers.clear()

        handler = logging.StreamHandler()
        handler.setFormatter(JSONFormatter())
        self.logger.addHandler(handler)

        self.logger.propagate = False

    def info(self, message: str, **extra: Any) -> None:
        """Log INFO level message.

        Args:
            message: Log message
            **extra: Additional context (url, strategy, duration_ms, etc.)
        """
        self.logger.info(message, extra=_strip_sensitive(extra))

    def warning(self, message: str, exc_info: bool = False, **extra: Any) -> None:
        """Log WARNING level message.

        Args:
            message: Log message
            exc_info: Include exception traceback
            **extra: Additional context
        """
        self.logger.warning(message, exc_info=exc_info, extra=_strip_sensitive(extra))

    def error(self, message: str, exc_info: bool = False, **extra: Any) -> None:
        """Log ERROR level message.

        Args:
            message: Log message
            exc_info: Include exception traceback
            **extra: Additional context
        """
        self.logger.error(message, exc_info=exc_info, extra=_strip_sensitive(extra))

    def debug(self, message: str, **extra: Any) -> None:
        self.logger.debug(message, extra=_strip_sensitive(extra))


def build_event(event: str, level: str = 'INFO', context: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Build an event log entry with correlation ID, minus sensitive keys."""
    log_entry = {
        'timestamp': _utc_timestamp(),
        'level': level.upper(),
        'event': event,
        'correlation_id': get_correlation_id(),
        **(context or {}),
    }
    return _strip_sensitive(log_entry)


def log_event(event: str, level: str = 'INFO', context: Optional[Dict[str, Any]] = None) -> None:
    """Log a named event without creating a logger instance.

    Args:
        event: Event name (e.g., "pagespeed.fetch_failed", "results.saved")
        level: Log level (INFO, WARNING, ERROR, DEBUG)
        context: Additional context dictionary

    Example:
        log_event('results.persist_skipped', level='WARNING', context={'reason': 'not_configured'})
    """
    print(json.dumps(build_event(event, level, context), default=str))


def log_request(endpoint: str, method: str, status_code: int, duration_ms: float) -> None:
    """Log API request with performance metrics.

    Args:
        endpoint: API endpoint path
        method: HTTP method
        status_code: HTTP status code
        duration_ms: Request duration in milliseconds
    """
    log_data = {
        'timestamp': _utc_timestamp(),
        'level': 'INFO',
        'message': f'{method} {endpoint}',
        'request_id': get_correlation_id(),
        'endpoint': endpoint,
        'method': method,
        'status_code': status_code,
        'duration_ms': duration_ms,
    }
    print(json.dumps(log_data))

