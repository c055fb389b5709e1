"""Success envelope helper shared by the route modules."""

from typing import TypeVar

from fastapi import Request

from contentmagic.core.models.io.base import ApiResponse

DataT = TypeVar("DataT")


def success(request: Request, data: DataT) -> ApiResponse[DataT]:
    return ApiResponse(data=data, request_id=getattr(request.state, "request_id", None))
