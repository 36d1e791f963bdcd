"""
Paginated collection schema.

Every paginated resource is exposed in this one shape, whichever endpoint
produced it.
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class Paginated(BaseModel, Generic[T]):
    """An ordered page of entities plus pagination metadata."""

    data: list[T] = Field(default_factory=list)
    total: int = Field(0, ge=0)
    page: int = Field(1, ge=1)
    per_page: int = Field(20, ge=1)
    total_pages: int = Field(1, ge=0, description="0 only when the server reports an empty collection")
