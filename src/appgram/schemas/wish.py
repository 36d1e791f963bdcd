"""
Wish (feature request) schemas.
"""

from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class WishStatus(str, Enum):
    """Wish lifecycle status."""

    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    PLANNED = "planned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    DECLINED = "declined"


class WishPriority(str, Enum):
    """Wish priority."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class Category(BaseModel):
    """Wish category."""

    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    slug: str = ""
    color: str = ""
    icon: Optional[str] = None
    description: Optional[str] = None
    wish_count: Optional[int] = None


class WishAuthor(BaseModel):
    """Public author details."""

    name: str
    email: Optional[str] = None
    avatar_url: Optional[str] = None


class Wish(BaseModel):
    """
    A votable feature request.

    has_voted is computed server-side for the identity token sent with the
    request; vote_count includes the current identity's vote when has_voted
    is true.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    project_id: str = ""
    category_id: Optional[str] = None
    title: str
    description: str = ""
    status: WishStatus = WishStatus.PENDING
    priority: Optional[WishPriority] = None
    author_type: Literal["user", "anonymous", "team_member"] = "anonymous"
    author_email: Optional[str] = None
    author_name: Optional[str] = None
    vote_count: int = Field(0, ge=0)
    comment_count: int = 0
    slug: str = ""
    is_pinned: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    completed_at: Optional[str] = None
    category: Optional[Category] = None
    author: Optional[WishAuthor] = None
    has_voted: bool = False


class WishFilters(BaseModel):
    """List filters for the public wishes endpoint."""

    model_config = ConfigDict(extra="forbid")

    status: Optional[WishStatus | list[WishStatus]] = None
    category_id: Optional[str] = None
    priority: Optional[WishPriority | list[WishPriority]] = None
    search: Optional[str] = None
    sort_by: Optional[Literal["votes", "created_at", "updated_at"]] = None
    sort_order: Optional[Literal["asc", "desc"]] = None
    page: Optional[int] = Field(None, ge=1)
    per_page: Optional[int] = Field(None, ge=1)
    fingerprint: Optional[str] = None

    def to_params(self) -> dict[str, Any]:
        """Query parameters; multi-value filters are comma-joined."""
        params: dict[str, Any] = {}
        for key, value in self.model_dump(exclude_none=True, mode="json").items():
            params[key] = ",".join(value) if isinstance(value, list) else value
        return params


class WishCreate(BaseModel):
    """Input for creating a wish."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    author_email: Optional[EmailStr] = None
    author_name: Optional[str] = None
    category_id: Optional[str] = None
