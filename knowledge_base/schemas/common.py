"""Response envelope and pagination schemas shared by all routers."""

import math
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class Pagination(BaseModel):
    """Offset pagination metadata."""

    page: int = Field(..., ge=1, description="Current page (1-based)")
    limit: int = Field(..., ge=1, description="Page size")
    total: int = Field(..., ge=0, description="Total rows in the filtered set")
    totalPages: int = Field(..., ge=0, description="Number of pages for this limit")

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, totalPages=math.ceil(total / limit))


class APIResponse(BaseModel, Generic[T]):
    """Envelope used by every endpoint: {success, data?, message?}."""

    success: bool = True
    data: Optional[T] = None
    message: Optional[str] = None


class PaginatedResponse(APIResponse[T], Generic[T]):
    """Envelope for list endpoints."""

    pagination: Optional[Pagination] = None


class ErrorResponse(BaseModel):
    """Envelope for failed requests."""

    success: bool = False
    error: str
    details: Optional[list[Any]] = None
