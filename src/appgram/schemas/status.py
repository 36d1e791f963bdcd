"""
Status page schemas.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class StatusType(str, Enum):
    """Overall or per-service status."""

    OPERATIONAL = "operational"
    MAINTENANCE = "maintenance"
    DEGRADED_PERFORMANCE = "degraded_performance"
    PARTIAL_OUTAGE = "partial_outage"
    MAJOR_OUTAGE = "major_outage"
    INCIDENT = "incident"


class StatusPage(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    project_id: str = ""
    name: str
    slug: str
    description: Optional[str] = None
    is_active: bool = True


class StatusUpdate(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    status_page_id: str = ""
    title: str
    description: str = ""
    status_type: StatusType = StatusType.INCIDENT
    state: str = "active"
    is_public: bool = True
    affected_services: list[str] = Field(default_factory=list)
    created_at: Optional[str] = None
    resolved_at: Optional[str] = None


class StatusPageService(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    status_page_id: str = ""
    name: str
    description: Optional[str] = None
    group_name: Optional[str] = None
    sort_order: int = 0
    is_active: bool = True


class StatusPageOverview(BaseModel):
    """Public status page overview."""

    model_config = ConfigDict(extra="allow")

    status_page: StatusPage
    current_status: StatusType = StatusType.OPERATIONAL
    active_updates: list[StatusUpdate] = Field(default_factory=list)
    recent_updates: list[StatusUpdate] = Field(default_factory=list)
    status_breakdown: dict[str, int] = Field(default_factory=dict)
    services_status: dict[str, StatusType] = Field(default_factory=dict)
    services: list[StatusPageService] = Field(default_factory=list)
    total_updates: int = 0
    active_count: int = 0
    resolved_count: int = 0
