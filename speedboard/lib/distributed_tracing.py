"""Correlation IDs for request tracking.

Every request gets an ID (from the X-Correlation-ID header or a fresh UUID)
that is stored in a context variable and stamped onto each log line.
"""

import contextvars
from uuid import uuid4

DEFAULT_CORRELATION_ID = 'no-request-id'

# Async-safe: each request task sees its own value
correlation_id: contextvars.ContextVar[str] = contextvars.ContextVar(
  'request_id', default=DEFAULT_CORRELATION_ID
)


def get_correlation_id() -> str:
  """Return the correlation ID of the current request, or the default outside one."""
  return correlation_id.get()


def set_correlation_id(request_id: str) -> None:
  """Bind a correlation ID to the current request context.

  Args:
      request_id: Client-provided X-Correlation-ID or a generated UUID
  """
  correlation_id.set(request_id)


def generate_correlation_id() -> str:
  """Generate a UUID4 correlation ID, bind it, and return it."""
  request_id = str(uuid4())
  set_correlation_id(request_id)
  return request_id


def reset_correlation_id() -> None:
  """Reset to the default value (used between tests)."""
  correlation_id.set(DEFAULT_CORRELATION_ID)
