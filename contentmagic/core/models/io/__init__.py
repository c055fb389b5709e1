"""Pydantic I/O schemas for the REST API (camelCase on the wire)."""

from .base import ApiResponse, CamelModel, ErrorBody, ErrorResponse, MessageRead, SanitizedStr

__all__ = ["ApiResponse", "CamelModel", "ErrorBody", "ErrorResponse", "MessageRead", "SanitizedStr"]
