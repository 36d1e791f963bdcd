"""
Comment schemas.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class Comment(BaseModel):
    """A comment on a wish."""

    model_config = ConfigDict(extra="allow")

    id: str
    wish_id: str = ""
    parent_id: Optional[str] = None
    author_type: Literal["user", "team_member", "anonymous"] = "anonymous"
    author_user_id: Optional[str] = None
    author_name: str = ""
    author_avatar_url: Optional[str] = None
    content: str = ""
    is_official: bool = False
    is_deleted: bool = False
    reply_count: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    replies: Optional[list["Comment"]] = None


class CommentCreate(BaseModel):
    """Input for creating a comment."""

    model_config = ConfigDict(str_strip_whitespace=True)

    wish_id: str
    content: str = Field(..., min_length=1, max_length=5000)
    author_name: Optional[str] = None
    author_email: Optional[EmailStr] = None
    parent_id: Optional[str] = None
