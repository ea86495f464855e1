"""Map exceptions onto RFC 7807 problem responses.

Every error body also carries ``success: false`` and ``error`` so callers of
the dispatch endpoint can treat failures uniformly.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from notification_service.core.database.exceptions import NotFoundError
from notification_service.core.exceptions import AppException
from notification_service.core.schemas import (
    ProblemDetails,
    ValidationErrorItem,
    ValidationProblemDetails,
)

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_DETAIL = "An unexpected error occurred while processing your request"


def _problem_response(
    request: Request,
    status_code: int,
    detail: str,
    *,
    type_: str,
    title: str | None = None,
    instance: str | None = None,
    extra: dict[str, Any] | None = None,
) -> JSONResponse:
    problem = ProblemDetails(
        type=type_,
        title=title or AppException._default_title(status_code),
        status=status_code,
        detail=detail,
        instance=instance or request.url.path,
        error=detail,
    )
    body = problem.model_dump(exclude_none=True)
    for key, value in (extra or {}).items():
        # Standard members win over extra context
        body.setdefault(key, value)
    return JSONResponse(status_code=status_code, content=body)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Input, storage and job-transition errors."""
    logger.warning(
        "Request failed",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": exc.type,
            "status_code": exc.status_code,
            "detail": exc.detail,
        },
    )
    return _problem_response(
        request,
        exc.status_code,
        exc.detail,
        type_=exc.type,
        title=exc.title,
        instance=exc.instance,
        extra=exc.extra,
    )


async def not_found_error_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    """Repository lookups that found nothing; the identifier is not echoed back."""
    logger.info(
        "Resource not found",
        extra={"path": request.url.path, "model": exc.model_name, "identifier": str(exc.identifier)},
    )
    return _problem_response(
        request,
        status.HTTP_404_NOT_FOUND,
        f"{exc.model_name} not found",
        type_="not-found",
        title="Not Found",
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Turn pydantic request errors into a 422 with one item per field."""
    items = [
        ValidationErrorItem(
            field=".".join(str(part) for part in error["loc"]),
            message=error["msg"],
            type=error["type"],
        )
        for error in exc.errors()
    ]
    logger.warning(
        "Request validation failed",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_count": len(items),
            "fields": [item.field for item in items],
        },
    )

    detail = f"Request validation failed for {len(items)} field(s)"
    problem = ValidationProblemDetails(
        type="validation-error",
        title="Validation Error",
        status=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=detail,
        instance=request.url.path,
        error=detail,
        errors=items,
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=problem.model_dump(exclude_none=True),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the traceback; the client only sees a generic 500."""
    logger.error(
        "Unhandled exception",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
        },
        exc_info=exc,
    )
    return _problem_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        UNEXPECTED_ERROR_DETAIL,
        type_="internal-error",
        title="Internal Server Error",
    )


def configure_exception_handlers(app: FastAPI) -> None:
    """Register the problem-details exception handlers on ``app``."""
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(NotFoundError, not_found_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.debug("Exception handlers configured")
