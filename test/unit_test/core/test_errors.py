"""
Unit tests for the application error hierarchy.
"""

import pytest

from contentmagic.core.errors import (
    AIServiceError,
    AppError,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    ErrorCode,
    NotFoundError,
    PaymentServiceError,
    RateLimitError,
    UsageLimitError,
    ValidationError,
)


class TestAppError:
    def test_defaults(self):
        error = AppError("boom")
        assert error.status_code == 500
        assert error.code == "INTERNAL_ERROR"
        assert error.to_dict() == {"code": "INTERNAL_ERROR", "message": "boom", "details": None}
        assert str(error) == "boom"

    def test_code_enum_is_unwrapped(self):
        error = AppError("gone", code=ErrorCode.SERVICE_UNAVAILABLE, status_code=503)
        assert error.code == "SERVICE_UNAVAILABLE"
        assert error.status_code == 503

    def test_status_override_does_not_leak_to_class(self):
        ValidationError("bad", status_code=422)
        assert ValidationError("bad").status_code == 400

    @pytest.mark.parametrize(
        "error, status_code, code",
        [
            (ValidationError("bad"), 400, "VALIDATION_ERROR"),
            (AuthenticationError(), 401, "UNAUTHORIZED"),
            (AuthorizationError(), 403, "FORBIDDEN"),
            (NotFoundError("Post"), 404, "RESOURCE_NOT_FOUND"),
            (ConflictError("taken"), 409, "RESOURCE_CONFLICT"),
            (RateLimitError(), 429, "RATE_LIMIT_EXCEEDED"),
            (UsageLimitError("quota"), 403, "USAGE_LIMIT_EXCEEDED"),
            (PaymentServiceError("stripe down"), 502, "PAYMENT_SERVICE_ERROR"),
        ],
    )
    def test_subclass_defaults(self, error, status_code, code):
        assert isinstance(error, AppError)
        assert error.status_code == status_code
        assert error.code == code

    def test_not_found_message(self):
        assert NotFoundError("Post").message == "Post not found"
        assert NotFoundError(message="Post not found or access denied").message == "Post not found or access denied"


class TestAIServiceError:
    def test_kind_and_retryable(self):
        error = AIServiceError("quota exhausted", kind="quota", retryable=False)
        assert error.kind == "quota"
        assert error.retryable is False
        assert error.status_code == 502
        assert error.code == "AI_SERVICE_ERROR"

    def test_defaults(self):
        error = AIServiceError("something odd")
        assert error.kind == "unknown"
        assert error.retryable is True
