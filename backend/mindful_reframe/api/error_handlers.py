"""Error Handlers — global exception handlers for the Mindful Reframe API.

Invariants:
    - ReframeError → its own envelope and http_status (to_response)
    - RequestValidationError → 400 with field-level details, never echoing input values
    - Exception (catch-all) → 500 that never leaks internal details
    - Client errors (4xx) log at WARNING, server errors (5xx) at ERROR

Design Decisions:
    - Three-layer handler: domain (ReframeError), validation (Pydantic), catch-all (Exception)
    - Extracted from main.py: app wiring stays a short, readable list
    - Validation details drop Pydantic's "input" key: request bodies carry journal
      text and chat messages, which must not reach logs or error bodies
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError

from mindful_reframe.core.errors import ReframeError, ErrorSeverity

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ReframeError, reframe_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)


async def reframe_error_handler(request: Request, exc: ReframeError):
    level = logging.ERROR if exc.http_status >= 500 else logging.WARNING
    logger.log(
        level, f"{exc.code}: {exc.message}",
        extra={
            "error_code": exc.code,
            "path": request.url.path,
            "session_id": exc.context.session_id,
        },
    )
    headers = None
    if exc.context.retry_after_ms:
        headers = {"Retry-After": str(max(1, exc.context.retry_after_ms // 1000))}
    return JSONResponse(
        status_code=exc.http_status, content=exc.to_response(), headers=headers,
    )


async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = _validation_details(exc)
    logger.warning(
        f"Validation error on {request.url.path}: "
        f"{[d['field'] for d in details]}",
        extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Invalid request data",
                "category": "validation",
                "severity": ErrorSeverity.ERROR.value,
                "details": details,
            },
        },
    )


async def generic_error_handler(request: Request, exc: Exception):
    """Catch-all — never leaks internal details."""
    logger.error(
        f"Unhandled exception on {request.url.path}: {type(exc).__name__}",
        exc_info=True,
        extra={"path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "category": "internal",
                "severity": ErrorSeverity.CRITICAL.value,
            },
        },
    )


def _validation_details(exc: RequestValidationError) -> list[dict]:
    return [
        {
            "field": ".".join(str(loc) for loc in e["loc"]),
            "message": e["msg"],
            "type": e["type"],
        }
        for e in exc.errors()
    ]
