"""
FastAPI exception handlers.

Every error response uses the same envelope as successful ones:

    {"code": 1004, "message": "user not found", "data": {...}}

The status code and business code come from `exc.kind`; handlers never branch
on the concrete exception class.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from psu_catalog.exceptions.base import AppError, ErrorKind, as_app_error

logger = logging.getLogger(__name__)

# Framework-level HTTP errors (unknown route, wrong method, ...) mapped onto our kinds
_HTTP_STATUS_TO_KIND = {
    401: ErrorKind.UNAUTHORIZED,
    403: ErrorKind.FORBIDDEN,
    404: ErrorKind.NOT_FOUND,
    409: ErrorKind.ALREADY_EXISTS,
}


def error_response(exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.http_status(), content=exc.to_payload())


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    status = exc.http_status()
    extra = {
        "method": request.method,
        "path": request.url.path,
        "error_code": exc.kind.code,
        "fields": exc.fields,
    }
    if status >= 500:
        # server-side failure: keep the cause and stack for triage
        logger.error("http.app_error", extra=extra, exc_info=exc)
    else:
        logger.info("http.client_error", extra={**extra, "error_message": exc.message})
    return error_response(exc)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """422 from FastAPI becomes INVALID_PARAM (400) with a compact per-field list."""
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    app_exc = AppError(kind=ErrorKind.INVALID_PARAM, data={"errors": errors})
    logger.info(
        "http.validation_error",
        extra={"method": request.method, "path": request.url.path, "errors": errors},
    )
    return error_response(app_exc)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    kind = _HTTP_STATUS_TO_KIND.get(exc.status_code, ErrorKind.INVALID_REQUEST)
    app_exc = AppError(kind=kind)
    response = JSONResponse(status_code=exc.status_code, content=app_exc.to_payload())
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: INTERNAL_ERROR (500) without any detail about the failure."""
    app_exc = as_app_error(exc)
    logger.exception(
        "http.unhandled_exception",
        extra={"method": request.method, "path": request.url.path},
        exc_info=exc,
    )
    return error_response(app_exc)


# Helper to register all handlers on an app (called from the app factory)
def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
