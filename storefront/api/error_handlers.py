"""Error Handlers — map exceptions to the storefront error envelope.

Invariants:
    - Every error body has the shape {"error": {code, message, category, severity, ...}}
    - Retryable errors carry Retry-After (whole seconds, at least 1)
    - Unhandled exceptions are logged with traceback and answered without details
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from storefront.core.errors import ErrorCategory, ErrorSeverity, StorefrontError

logger = logging.getLogger(__name__)


def _envelope(
    code: str, message: str, category: ErrorCategory, severity: ErrorSeverity,
    **extra,
) -> dict:
    return {"error": {
        "code": code,
        "message": message,
        "category": category.value,
        "severity": severity.value,
        **extra,
    }}


def _retry_after(exc: StorefrontError) -> dict[str, str] | None:
    if not exc.retryable:
        return None
    retry_ms = exc.context.retry_after_ms or 1000
    return {"Retry-After": str(max(1, retry_ms // 1000))}


async def handle_storefront_error(request: Request, exc: StorefrontError):
    level = logging.ERROR if exc.http_status >= 500 else logging.WARNING
    logger.log(
        level, exc.message,
        extra={"error_code": exc.code, "path": request.url.path},
    )
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_response(),
        headers=_retry_after(exc),
    )


async def handle_validation_error(request: Request, exc: RequestValidationError):
    details = [
        {
            "field": ".".join(str(loc) for loc in e["loc"]),
            "message": e["msg"],
            "type": e["type"],
        }
        for e in exc.errors()
    ]
    logger.warning(
        f"Rejected request body: {len(details)} field error(s)",
        extra={"error_code": "INVALID_REQUEST", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_envelope(
            "INVALID_REQUEST", "Invalid request data",
            ErrorCategory.VALIDATION, ErrorSeverity.WARNING,
            details=details,
        ),
    )


async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception(
        f"Unhandled {exc.__class__.__name__}",
        extra={"error_code": "INTERNAL_ERROR", "path": request.url.path},
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope(
            "INTERNAL_ERROR", "An unexpected error occurred",
            ErrorCategory.INTERNAL, ErrorSeverity.CRITICAL,
        ),
    )


def register_error_handlers(app: FastAPI) -> None:
    """Domain errors first, then request validation, then the catch-all."""
    app.add_exception_handler(StorefrontError, handle_storefront_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
