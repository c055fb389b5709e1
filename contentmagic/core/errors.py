"""Error types for the ContentMagic backend.

Every error a route or service raises deliberately is an :class:`AppError`.
It carries a machine-readable code, a client-safe message, the HTTP status
and optional details; the server's exception handlers turn it into the JSON
error envelope.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class ErrorCode(str, Enum):
    """Machine-readable error codes shared by all routes."""

    # Authentication and authorization
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    ALREADY_AUTHENTICATED = "ALREADY_AUTHENTICATED"

    # Validation
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_INPUT = "INVALID_INPUT"
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"

    # Resources
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    RESOURCE_ALREADY_EXISTS = "RESOURCE_ALREADY_EXISTS"
    RESOURCE_CONFLICT = "RESOURCE_CONFLICT"

    # Limits
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    USAGE_LIMIT_EXCEEDED = "USAGE_LIMIT_EXCEEDED"

    # External services
    AI_SERVICE_ERROR = "AI_SERVICE_ERROR"
    AI_GENERATION_FAILED = "AI_GENERATION_FAILED"
    PAYMENT_SERVICE_ERROR = "PAYMENT_SERVICE_ERROR"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"

    # Storage
    DATABASE_ERROR = "DATABASE_ERROR"
    DATABASE_CONNECTION_ERROR = "DATABASE_CONNECTION_ERROR"

    # System
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"


class AppError(Exception):
    """Base error for all application-level failures."""

    status_code: int = 500
    default_code: str = ErrorCode.INTERNAL_ERROR.value

    def __init__(
        self,
        message: str,
        code: str | ErrorCode | None = None,
        status_code: Optional[int] = None,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        code = code or self.default_code
        self.code = code.value if isinstance(code, ErrorCode) else code
        if status_code is not None:
            self.status_code = status_code
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class ValidationError(AppError):
    """Raised when request input fails validation."""

    status_code = 400
    default_code = ErrorCode.VALIDATION_ERROR.value


class AuthenticationError(AppError):
    """Raised when a request is not authenticated or credentials are wrong."""

    status_code = 401
    default_code = ErrorCode.UNAUTHORIZED.value

    def __init__(self, message: str = "Authentication required", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class AuthorizationError(AppError):
    """Raised when an authenticated user may not perform an action."""

    status_code = 403
    default_code = ErrorCode.FORBIDDEN.value

    def __init__(self, message: str = "Access denied", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class NotFoundError(AppError):
    """Raised when a requested resource does not exist."""

    status_code = 404
    default_code = ErrorCode.RESOURCE_NOT_FOUND.value

    def __init__(self, resource: str = "Resource", message: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(message or f"{resource} not found", **kwargs)


class ConflictError(AppError):
    """Raised when a write conflicts with existing state."""

    status_code = 409
    default_code = ErrorCode.RESOURCE_CONFLICT.value


class RateLimitError(AppError):
    """Raised when a client exceeds a request rate limit."""

    status_code = 429
    default_code = ErrorCode.RATE_LIMIT_EXCEEDED.value

    def __init__(self, message: str = "Too many requests, please try again later.", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class UsageLimitError(AppError):
    """Raised when a user has used up the monthly generation quota."""

    status_code = 403
    default_code = ErrorCode.USAGE_LIMIT_EXCEEDED.value


class AIServiceError(AppError):
    """Raised when the AI provider fails or returns an unusable result.

    ``kind`` classifies the failure (timeout, rate_limit, quota, unavailable,
    client, unknown) and ``retryable`` tells the retry loop whether another
    attempt can help.
    """

    status_code = 502
    default_code = ErrorCode.AI_SERVICE_ERROR.value

    def __init__(
        self,
        message: str,
        kind: str = "unknown",
        retryable: bool = True,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.kind = kind
        self.retryable = retryable


class PaymentServiceError(AppError):
    """Raised when the payment provider rejects or fails a request."""

    status_code = 502
    default_code = ErrorCode.PAYMENT_SERVICE_ERROR.value


class DatabaseError(AppError):
    """Raised for storage failures that are not connection problems."""

    status_code = 500
    default_code = ErrorCode.DATABASE_ERROR.value
