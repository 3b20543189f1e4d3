"""Reusable error primitives for API exception handling."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping

import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from ..exceptions import (
    AppError,
    DomainStateError,
    InternalError,
    InvalidSearchArgumentsError,
    InvalidSearchKindError,
    NotFoundError,
    RepositoryError,
    SigningError,
    StorageOperationError,
)

logger = structlog.get_logger(__name__)

STATUS_BY_ERROR: tuple[tuple[type[AppError], int], ...] = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (DomainStateError, status.HTTP_400_BAD_REQUEST),
    (InvalidSearchKindError, status.HTTP_400_BAD_REQUEST),
    (InvalidSearchArgumentsError, status.HTTP_400_BAD_REQUEST),
    (StorageOperationError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (SigningError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (InternalError, status.HTTP_500_INTERNAL_SERVER_ERROR),
    (RepositoryError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


@dataclass(slots=True)
class ApiError(Exception):
    """Structured application-level error for HTTP handlers."""

    status_code: int
    message: str
    error_message: str
    details: Mapping[str, Any] = field(default_factory=dict)

    def to_response(self) -> JSONResponse:
        """Materialise the error into a ``JSONResponse`` instance."""

        return JSONResponse(
            status_code=self.status_code,
            content={
                "message": self.message,
                "error_message": self.error_message,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "details": dict(self.details),
            },
        )


def status_for(exc: AppError) -> int:
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def to_api_error(exc: AppError) -> ApiError:
    status_code = status_for(exc)
    return ApiError(
        status_code=status_code,
        message=type(exc).__name__,
        error_message=exc.message,
        details=exc.details(),
    )


async def api_error_handler(_: Request, exc: ApiError) -> JSONResponse:
    """Convert :class:`ApiError` exceptions into JSON payloads."""

    return exc.to_response()


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Map domain errors to HTTP statuses."""

    error = to_api_error(exc)
    log = logger.error if error.status_code >= 500 else logger.info
    log(
        "api.error",
        path=request.url.path,
        status_code=error.status_code,
        error=error.message,
        detail=error.error_message,
    )
    return error.to_response()


async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    logger.info("api.error", path=request.url.path, status_code=400, error="ValueError")
    return ApiError(status.HTTP_400_BAD_REQUEST, "ValueError", str(exc)).to_response()


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(AppError, app_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(ValueError, value_error_handler)  # type: ignore[arg-type]


__all__ = [
    "ApiError",
    "api_error_handler",
    "app_error_handler",
    "register_exception_handlers",
    "status_for",
    "to_api_error",
]
