"""
Global exception handlers.

Every error response uses the same envelope as the routers:

    {"error": {"code": "...", "message": "..."}}

Validation failures are reported as 400 with a ``details`` list, and any
unhandled exception becomes a logged 500.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

# Fallback codes for HTTPExceptions raised with a plain string detail
_STATUS_CODES: dict[int, str] = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    500: "INTERNAL_ERROR",
}


def error_body(code: str, message: str) -> dict:
    """Standard error envelope."""
    return {"error": {"code": code, "message": message}}


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, StarletteHTTPException)

    if isinstance(exc.detail, dict) and "error" in exc.detail:
        content = exc.detail
    else:
        code = _STATUS_CODES.get(exc.status_code, "ERROR")
        content = error_body(code, str(exc.detail))

    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Convert RequestValidationError to a 400 envelope with field details."""
    assert isinstance(exc, RequestValidationError)

    details = []
    for error in exc.errors():
        # ["body", "name"] -> "name"
        loc = [str(p) for p in error.get("loc", []) if p not in ("body", "query", "path", "form")]
        details.append(
            {
                "field": ".".join(loc) if loc else "unknown",
                "message": error.get("msg", "Invalid value"),
            }
        )

    content = error_body("VALIDATION_ERROR", "Request validation failed")
    content["error"]["details"] = details
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=content)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("INTERNAL_ERROR", "An internal server error occurred"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
