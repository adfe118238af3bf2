"""Exception handlers rendering every failure as an ``{"error": ...}`` body."""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from awv.core.logging import logger
from awv.shared.exceptions import ValidationFailedException


def _validation_details(exc: RequestValidationError) -> list:
    details = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        details.append({"field": location, "message": error.get("msg", "Invalid value")})
    return details


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Handle HTTP exceptions raised by routes and services.

    Args:
        request: Request object
        exc: HTTP exception

    Returns:
        JSON error response
    """
    content = {"error": exc.detail}
    if isinstance(exc, ValidationFailedException) and exc.errors:
        content["details"] = exc.errors

    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        logger.warning(f"Unauthorized request to {request.url.path}: {exc.detail}")

    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Request bodies and query strings that fail schema validation are a 400."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Validation failed",
            "details": _validation_details(exc),
        },
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions.

    The exception is logged with its traceback; the client only sees a
    generic message.
    """
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
