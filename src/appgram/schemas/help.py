"""
Help center schemas.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class HelpArticle(BaseModel):
    """A help article."""

    model_config = ConfigDict(extra="allow")

    id: str
    flow_id: str = ""
    title: str
    slug: str
    content: str = ""
    excerpt: Optional[str] = None
    article_type: Literal["guide", "faq", "tutorial"] = "guide"
    is_published: bool = True
    sort_order: int = 0
    published_at: Optional[str] = None


class HelpFlow(BaseModel):
    """A group of help articles."""

    model_config = ConfigDict(extra="allow")

    id: str
    collection_id: str = ""
    name: str
    slug: str
    description: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    display_type: Literal["list", "accordion", "decision_tree", "wizard"] = "list"
    sort_order: int = 0
    articles: list[HelpArticle] = Field(default_factory=list)


class HelpCollection(BaseModel):
    """The live help collection for a project."""

    model_config = ConfigDict(extra="allow")

    id: str
    project_id: str = ""
    name: str
    version: str = ""
    description: Optional[str] = None
    is_live: bool = True
    flows: list[HelpFlow] = Field(default_factory=list)


class HelpCenterData(BaseModel):
    """Help center payload."""

    collection: Optional[HelpCollection] = None
    flows: list[HelpFlow] = Field(default_factory=list)
