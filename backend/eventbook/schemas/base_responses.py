"""
Base response schemas for standardized API responses.

Every list endpoint returns PaginatedResponse; simple acknowledgements
return SuccessResponse.
"""

import math
from typing import Any, Dict, Generic, List, Optional, Sequence, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """Standard paginated response for all list endpoints."""

    items: List[T] = Field(description="List of items")
    total: int = Field(description="Total number of items")
    page: int = Field(default=1, description="Current page number", ge=1)
    per_page: int = Field(default=10, description="Items per page", ge=1, le=100)
    pages: int = Field(description="Total number of pages")
    has_next: bool = Field(description="Whether there's a next page")
    has_prev: bool = Field(description="Whether there's a previous page")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "items": ["..."],
                "total": 42,
                "page": 1,
                "per_page": 10,
                "pages": 5,
                "has_next": True,
                "has_prev": False,
            }
        }
    )

    @classmethod
    def build(cls, items: Sequence[Any], total: int, page: int, per_page: int) -> "PaginatedResponse[T]":
        pages = math.ceil(total / per_page) if per_page else 0
        return cls(
            items=list(items),
            total=total,
            page=page,
            per_page=per_page,
            pages=pages,
            has_next=page < pages,
            has_prev=page > 1,
        )


class SuccessResponse(BaseModel):
    """Standard success response for operations."""

    success: bool = Field(default=True, description="Operation success status")
    message: str = Field(description="Human-readable success message")
    data: Optional[Dict[str, Any]] = Field(default=None, description="Optional additional data")
