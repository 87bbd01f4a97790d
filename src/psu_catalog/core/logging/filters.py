"""
Logging filters.

- RequestIdFilter stamps `record.request_id` from a context variable set by
  `RequestIDMiddleware`, so every line emitted while serving a request can be
  correlated. A `contextvars.ContextVar` (not `threading.local`) survives
  `await` boundaries and keeps concurrent requests apart.
- RedactFilter masks sensitive values passed through `extra={...}`, including
  one level of nested dicts.

Both filters only annotate records; they always return True.
"""

import contextvars
import logging
from logging import LogRecord

# Default None means "no request id set"
_request_id_ctx: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "request_id", default=None
)

REDACTED = "***REDACTED***"


def set_request_id(request_id: str | None) -> contextvars.Token:
    """Set the request id for the current context; keep the token to reset it."""
    return _request_id_ctx.set(request_id)


def reset_request_id(token: contextvars.Token) -> None:
    _request_id_ctx.reset(token)


def get_request_id() -> str | None:
    return _request_id_ctx.get()


class RequestIdFilter(logging.Filter):
    """
    Guarantee every LogRecord has a `request_id` attribute.

    Precedence: an explicit `extra={"request_id": ...}`, then the context
    variable, then the sentinel "-" (so `%(request_id)s` never raises KeyError).
    """

    def filter(self, record: LogRecord) -> bool:
        record.request_id = (
            getattr(record, "request_id", None) or get_request_id() or "-"
        )
        return True


class RedactFilter(logging.Filter):
    SENSITIVE = {
        "password",
        "hashed_password",
        "secret",
        "jwt_secret",
        "token",
        "access_token",
        "refresh_token",
        "authorization",
    }

    def _scrub(self, value):
        if isinstance(value, dict):
            return {
                k: (REDACTED if isinstance(k, str) and k.lower() in self.SENSITIVE else v)
                for k, v in value.items()
            }
        return value

    def filter(self, record: LogRecord) -> bool:
        for key in list(record.__dict__.keys()):
            if key.lower() in self.SENSITIVE:
                record.__dict__[key] = REDACTED
            else:
                record.__dict__[key] = self._scrub(record.__dict__[key])
        return True
