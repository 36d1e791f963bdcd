"""
Release / changelog schemas.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ReleaseFeature(BaseModel):
    """A highlighted feature within a release."""

    model_config = ConfigDict(extra="allow")

    id: str
    release_id: str = ""
    title: str
    description: str = ""
    image_url: Optional[str] = None
    sort_order: int = 0


class ReleaseItem(BaseModel):
    """A single changelog line."""

    model_config = ConfigDict(extra="allow")

    id: str
    release_id: str = ""
    title: str
    description: Optional[str] = None
    type: Literal["feature", "improvement", "bugfix", "other"] = "other"
    image_url: Optional[str] = None
    sort_order: int = 0


class Release(BaseModel):
    """A published release."""

    model_config = ConfigDict(extra="allow")

    id: str
    project_id: str = ""
    title: str
    content: str = ""
    excerpt: Optional[str] = None
    cover_image_url: Optional[str] = None
    slug: str
    is_published: bool = True
    published_at: Optional[str] = None
    version: Optional[str] = None
    labels: list[str] = Field(default_factory=list)
    wish_ids: list[str] = Field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    features: list[ReleaseFeature] = Field(default_factory=list)
    items: list[ReleaseItem] = Field(default_factory=list)
