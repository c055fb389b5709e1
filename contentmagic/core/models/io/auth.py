"""Authentication request and response schemas."""

from __future__ import annotations

import re

from pydantic import Field, field_validator

from .base import CamelModel, SanitizedStr

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PASSWORD_PATTERN = re.compile(r"(?=.*[a-z])(?=.*[A-Z])(?=.*[0-9])(?=.*[@$!%*?&])[A-Za-z0-9@$!%*?&]{8,128}")


def normalize_email(value: str) -> str:
    value = value.strip().lower()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Invalid email format")
    return value


class RegisterRequest(CamelModel):
    """Schema for creating an account."""

    email: SanitizedStr = Field(max_length=255)
    password: str

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        return normalize_email(value)

    @field_validator("password")
    @classmethod
    def _check_password(cls, value: str) -> str:
        if not PASSWORD_PATTERN.fullmatch(value):
            raise ValueError(
                "Password must be 8-128 characters with uppercase, lowercase, number and special character (@$!%*?&)"
            )
        return value


class LoginRequest(CamelModel):
    """Schema for signing in."""

    email: SanitizedStr = Field(max_length=255)
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        return normalize_email(value)


class UserRead(CamelModel):
    """Public view of an account."""

    id: int
    email: str
    subscription_tier: str
    monthly_usage: int


class UserEnvelope(CamelModel):
    user: UserRead
