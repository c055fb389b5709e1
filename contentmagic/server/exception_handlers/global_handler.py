"""
Global Exception Handlers for the FastAPI Application.

Every failure leaves the API in the same envelope:
``{"success": false, "error": {"code", "message", "details"}, "timestamp", "requestId"}``.
Client errors are logged as warnings, server errors with their traceback and
an error id clients can quote when reporting a problem.
"""

import uuid
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

from contentmagic.core.errors import AppError, ErrorCode
from contentmagic.core.logging_config import get_logger
from contentmagic.core.models.io.base import ErrorBody, ErrorResponse
from contentmagic.core.monitoring import log_error
from contentmagic.server.core.rate_limit import AUTH_ATTEMPT_PATHS, client_ip

logger = get_logger(__name__)

HTTP_STATUS_CODES = {
    400: ErrorCode.VALIDATION_ERROR.value,
    401: ErrorCode.UNAUTHORIZED.value,
    403: ErrorCode.FORBIDDEN.value,
    404: ErrorCode.RESOURCE_NOT_FOUND.value,
    405: "METHOD_NOT_ALLOWED",
    409: ErrorCode.RESOURCE_CONFLICT.value,
    429: ErrorCode.RATE_LIMIT_EXCEEDED.value,
    503: ErrorCode.SERVICE_UNAVAILABLE.value,
}


def error_response(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    details: Any = None,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    body = ErrorResponse(
        error=ErrorBody(code=code, message=message, details=details),
        request_id=getattr(request.state, "request_id", None),
    )
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body.model_dump(by_alias=True)),
        headers=headers,
    )


def _log(request: Request, status_code: int, code: str, message: str) -> None:
    text = f"{request.method} {request.url.path} -> {status_code} {code}: {message}"
    if status_code >= 500:
        logger.error(text)
    else:
        logger.warning(text)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render an :class:`AppError` with its own status and code."""
    if exc.status_code >= 500:
        logger.error(
            f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}: {exc.message}",
            exc_info=exc,
        )
        log_error(exc.code, exc.message, {"path": request.url.path, "method": request.method})
    else:
        _log(request, exc.status_code, exc.code, exc.message)

    headers = None
    if isinstance(exc.details, dict) and "retryAfter" in exc.details:
        headers = {"Retry-After": str(exc.details["retryAfter"])}
    return error_response(request, exc.status_code, exc.code, exc.message, exc.details, headers)


def _record_failed_auth_attempt(request: Request) -> None:
    limiters = getattr(request.app.state, "rate_limiters", None)
    if limiters is not None and request.url.path in AUTH_ATTEMPT_PATHS:
        limiters.auth.record(client_ip(request))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Turn request validation failures into a 400 listing the offending fields.

    Rejected register and login payloads are failed auth attempts too.
    """
    details = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg", "Invalid value"),
        }
        for error in exc.errors()
    ]
    _record_failed_auth_attempt(request)
    _log(request, 400, ErrorCode.VALIDATION_ERROR.value, "Validation failed")
    return error_response(request, 400, ErrorCode.VALIDATION_ERROR.value, "Validation failed", details)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = HTTP_STATUS_CODES.get(exc.status_code, "HTTP_ERROR")
    message = str(exc.detail)
    if exc.status_code == 404 and exc.detail == "Not Found":
        message = f"Route {request.method} {request.url.path} not found"
    _log(request, exc.status_code, code, message)
    return error_response(request, exc.status_code, code, message, headers=getattr(exc, "headers", None))


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    _log(request, 409, ErrorCode.RESOURCE_ALREADY_EXISTS.value, str(exc.orig))
    return error_response(request, 409, ErrorCode.RESOURCE_ALREADY_EXISTS.value, "Resource already exists")


async def database_connection_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Database unavailable during {request.method} {request.url.path}: {exc}", exc_info=exc)
    log_error("DATABASE_CONNECTION_ERROR", str(exc), {"path": request.url.path})
    return error_response(
        request, 503, ErrorCode.DATABASE_CONNECTION_ERROR.value, "Database connection failed. Please try again later."
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Catch-all for unexpected exceptions.

    The full error is logged with an error id; the response only carries the
    id, and hides the exception message in production.
    """
    error_id = uuid.uuid4().hex
    logger.error(
        f"Unhandled exception [{error_id}] in {request.method} {request.url.path}: {exc}",
        exc_info=exc,
        extra={
            "error_id": error_id,
            "method": request.method,
            "path": request.url.path,
            "client": request.client.host if request.client else "unknown",
            "error_type": type(exc).__name__,
        },
    )
    log_error(type(exc).__name__, str(exc), {"error_id": error_id, "path": request.url.path})

    settings = getattr(request.app.state, "settings", None)
    production = settings.is_production if settings is not None else False
    message = "Internal server error" if production else str(exc) or "Internal server error"
    return error_response(request, 500, ErrorCode.INTERNAL_ERROR.value, message, {"errorId": error_id})


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(OperationalError, database_connection_error_handler)
    app.add_exception_handler(InterfaceError, database_connection_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)
    logger.debug("Exception handlers registered successfully")
