"""
Roadmap schemas.
"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from appgram.schemas.wish import Wish


class RoadmapItem(BaseModel):
    """A card on the roadmap, optionally linked to a wish."""

    model_config = ConfigDict(extra="allow")

    id: str
    roadmap_id: str = ""
    column_id: str = ""
    wish_id: Optional[str] = None
    title: str
    description: Optional[str] = None
    sort_order: int = 0
    color: Optional[str] = None
    target_date: Optional[str] = None
    wish: Optional[Wish] = None


class RoadmapColumn(BaseModel):
    """A roadmap column."""

    model_config = ConfigDict(extra="allow")

    id: str
    roadmap_id: str = ""
    name: str
    color: str = ""
    sort_order: int = 0
    wip_limit: Optional[int] = None
    items: list[RoadmapItem] = Field(default_factory=list)


class Roadmap(BaseModel):
    """Roadmap metadata."""

    model_config = ConfigDict(extra="allow")

    id: str
    project_id: str = ""
    name: str
    description: Optional[str] = None
    visibility: Literal["public", "private", "voters_only"] = "public"
    show_vote_counts: bool = True
    show_comments: bool = True
    is_default: bool = False
    columns: list[RoadmapColumn] = Field(default_factory=list)


class RoadmapData(BaseModel):
    """
    Roadmap payload.

    Columns may arrive at the top level or nested inside the roadmap; both are
    folded into ``columns``. total_items is computed from the columns when the
    server omits it.
    """

    model_config = ConfigDict(extra="allow")

    roadmap: Optional[Roadmap] = None
    columns: list[RoadmapColumn] = Field(default_factory=list)
    total_items: int = 0
    customization: Optional[dict[str, Any]] = None

    @model_validator(mode="after")
    def fold_columns(self) -> "RoadmapData":
        if not self.columns and self.roadmap is not None:
            self.columns = list(self.roadmap.columns)
        if not self.total_items:
            self.total_items = sum(len(col.items) for col in self.columns)
        return self
