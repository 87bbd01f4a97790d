"""
Request ID middleware for FastAPI / Starlette.

Uses the incoming `X-Request-ID` header when it looks sane, otherwise generates
a UUID4; stores it in the logging context variable for the duration of the
request and echoes it on the response.
"""

import re
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from .filters import reset_request_id, set_request_id

REQUEST_ID_HEADER = "X-Request-ID"

# Opaque ids only: no whitespace or control characters (log injection), bounded length
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


def resolve_request_id(incoming: str | None) -> str:
    if incoming and _VALID_REQUEST_ID.match(incoming):
        return incoming
    return str(uuid.uuid4())


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        token = set_request_id(rid)
        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = rid
            return response
        finally:
            reset_request_id(token)
