"""
Blog / resources schemas.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class BlogCategory(BaseModel):
    """A blog category."""

    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    slug: str
    description: Optional[str] = None
    color: Optional[str] = None
    post_count: Optional[int] = None


class BlogPost(BaseModel):
    """A published blog post."""

    model_config = ConfigDict(extra="allow")

    id: str
    project_id: str = ""
    category_id: Optional[str] = None
    title: str
    slug: str
    content: str = ""
    excerpt: Optional[str] = None
    meta_description: Optional[str] = None
    og_image_url: Optional[str] = None
    author_name: Optional[str] = None
    published_at: Optional[str] = None
    is_featured: bool = False
    tags: list[str] = Field(default_factory=list)
    view_count: int = 0
    category: Optional[BlogCategory] = None


class BlogFilters(BaseModel):
    """List filters for blog posts."""

    model_config = ConfigDict(extra="forbid")

    category_slug: Optional[str] = None
    tag: Optional[str] = None
    search: Optional[str] = None
    is_featured: Optional[bool] = None
    page: Optional[int] = Field(None, ge=1)
    per_page: Optional[int] = Field(None, ge=1)

    def to_params(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)
