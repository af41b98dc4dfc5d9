"""Exception handlers for structured error responses."""

import logging
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from ..exceptions import GitDocifyException, ValidationError

logger = logging.getLogger(__name__)


async def gitdocify_exception_handler(request: Request, exc: GitDocifyException) -> JSONResponse:
    """
    Handle custom exceptions and return structured JSON responses.

    Args:
        request: FastAPI request object
        exc: GitDocifyException instance

    Returns:
        JSONResponse with ``{"error", "code", "details"}``
    """
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"GitDocifyException: {exc.error_code.value}",
        extra={
            "error_code": exc.error_code.value,
            "path": request.url.path,
            "method": request.method,
            "details": exc.details,
            "status_code": exc.status_code
        }
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report body/query validation failures as 400 ValidationError responses."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body") or None
        message = f"Invalid request: {first.get('msg', 'validation failed')}"
    else:
        field = None
        message = "Invalid request body"

    if any(e.get("type") == "json_invalid" for e in errors):
        message = "Invalid JSON in request body"

    return await gitdocify_exception_handler(request, ValidationError(message, field=field))
