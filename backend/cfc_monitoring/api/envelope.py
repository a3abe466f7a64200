# backend/cfc_monitoring/api/envelope.py
"""Uniform response envelope and error mapping.

Every endpoint answers with:

    {"success": bool, "data": ..., "message": str, "timestamp": ISO-8601 UTC,
     "error": str | null}
"""

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from cfc_monitoring.errors import (
    InvalidTransitionError,
    MonitoringError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def iso_timestamp(value: datetime | None = None) -> str:
    """ISO-8601 UTC with millisecond precision and a Z suffix."""
    value = value or datetime.now(tz=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


class ApiResponse(BaseModel):
    """Response envelope shared by every endpoint."""

    success: bool
    data: Any = None
    message: str
    timestamp: str
    error: str | None = None


def ok(data: Any = None, message: str = "OK") -> ApiResponse:
    return ApiResponse(success=True, data=data, message=message, timestamp=iso_timestamp())


def failure(status_code: int, message: str, error: str, data: Any = None) -> JSONResponse:
    body = ApiResponse(
        success=False,
        data=data,
        message=message,
        timestamp=iso_timestamp(),
        error=error,
    )
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


ERROR_STATUS: dict[type[MonitoringError], tuple[int, str]] = {
    NotFoundError: (404, "not_found"),
    InvalidTransitionError: (400, "invalid_transition"),
    ValidationError: (400, "validation_error"),
    PersistenceError: (500, "persistence_error"),
}


async def monitoring_error_handler(request: Request, exc: MonitoringError) -> JSONResponse:
    status_code, error = 500, "internal_error"
    for error_type, mapped in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            status_code, error = mapped
            break

    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    else:
        logger.debug("%s %s rejected: %s", request.method, request.url.path, exc)
    return failure(status_code, str(exc), error)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return failure(
        422,
        "Request validation failed",
        "request_validation_error",
        data=jsonable_encoder(exc.errors()),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MonitoringError, monitoring_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
