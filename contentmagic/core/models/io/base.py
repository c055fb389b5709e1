"""
Shared I/O building blocks.

API payloads use camelCase keys on the wire and snake_case attributes in
Python. Every successful response is wrapped in :class:`ApiResponse` and
every failure in :class:`ErrorResponse`.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Generic, Optional, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

from contentmagic.core.database.base import utc_now
from contentmagic.core.security import sanitize_text

DataT = TypeVar("DataT")

# Free text from clients with HTML and script tags removed
SanitizedStr = Annotated[str, BeforeValidator(sanitize_text)]


class CamelModel(BaseModel):
    """Base schema serialized with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ApiResponse(CamelModel, Generic[DataT]):
    """Success envelope."""

    success: bool = True
    data: DataT
    timestamp: datetime = Field(default_factory=utc_now)
    request_id: Optional[str] = None


class ErrorBody(CamelModel):
    code: str
    message: str
    details: Any = None


class ErrorResponse(CamelModel):
    """Failure envelope."""

    success: bool = False
    error: ErrorBody
    timestamp: datetime = Field(default_factory=utc_now)
    request_id: Optional[str] = None


class MessageRead(CamelModel):
    message: str
