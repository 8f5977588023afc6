"""
Standard API Response Models

Successful responses share one envelope: ``success``, an optional
``message``, the ``data`` payload and, for list endpoints, ``pagination``.
"""

from math import ceil
from typing import TypeVar, Generic, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


T = TypeVar('T')


class PaginationMeta(BaseModel):
    """Standard pagination metadata"""
    current_page: int = Field(description="Current page number (1-indexed)")
    per_page: int = Field(description="Number of items per page")
    total: int = Field(description="Total number of items")
    total_pages: int = Field(description="Total number of pages")

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "currentPage": 1,
                "perPage": 10,
                "total": 42,
                "totalPages": 5,
            }
        },
    )

    @classmethod
    def build(cls, page: int, per_page: int, total: int) -> "PaginationMeta":
        return cls(
            current_page=page,
            per_page=per_page,
            total=total,
            total_pages=ceil(total / per_page) if per_page else 0,
        )


class APIResponse(BaseModel, Generic[T]):
    """
    Standard response envelope for all API endpoints

    Usage:
        return APIResponse(data=event, message="Event created successfully")
    """
    success: bool = Field(default=True, description="Whether the request was successful")
    message: Optional[str] = Field(None, description="Optional status message")
    data: Optional[T] = Field(None, description="Response payload")
    pagination: Optional[PaginationMeta] = Field(None, description="Pagination information if applicable")
