"""
Support request schemas.
"""

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from appgram.schemas.upload import UploadFile


class SupportRequestStatus(str, Enum):
    """Support ticket status."""

    NEW = "new"
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class SupportRequestCategory(str, Enum):
    """Support ticket category."""

    BUG_REPORT = "bug_report"
    FEATURE_REQUEST = "feature_request"
    GENERAL_INQUIRY = "general_inquiry"
    BILLING = "billing"
    ACCOUNT = "account"


class SupportAttachment(BaseModel):
    """An uploaded file as referenced by a ticket."""

    model_config = ConfigDict(extra="allow")

    url: str
    name: str
    size: int = Field(0, ge=0)
    mime_type: Optional[str] = None


class SupportMessage(BaseModel):
    """A message on a support ticket."""

    model_config = ConfigDict(extra="allow")

    id: str
    support_request_id: str = ""
    author_type: Literal["user", "team_member"] = "user"
    author_email: Optional[str] = None
    author_name: Optional[str] = None
    content: str
    is_internal: bool = False
    attachments: list[SupportAttachment] = Field(default_factory=list)
    created_at: Optional[str] = None


class SupportRequest(BaseModel):
    """A support ticket."""

    model_config = ConfigDict(extra="allow")

    id: str
    project_id: str = ""
    subject: str
    description: str = ""
    status: SupportRequestStatus = SupportRequestStatus.NEW
    priority: Optional[str] = None
    category: Optional[SupportRequestCategory] = None
    user_email: str
    user_name: Optional[str] = None
    message_count: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    resolved_at: Optional[str] = None
    messages: list[SupportMessage] = Field(default_factory=list)
    attachments: list[SupportAttachment] = Field(default_factory=list)


class SupportRequestInput(BaseModel):
    """Input for submitting a support ticket. Attachments are uploaded first."""

    subject: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    user_email: EmailStr
    user_name: Optional[str] = None
    external_user_id: Optional[str] = None
    category: Optional[SupportRequestCategory] = None
    attachments: list[UploadFile] = Field(default_factory=list)


class MagicLinkRequest(BaseModel):
    """Input for requesting ticket access by email."""

    user_email: EmailStr


class TicketAccess(BaseModel):
    """Tickets unlocked by a magic-link token."""

    model_config = ConfigDict(extra="allow")

    tickets: list[SupportRequest] = Field(default_factory=list)
    user_email: str


class SupportMessageCreated(BaseModel):
    """Acknowledgement for a new ticket message."""

    model_config = ConfigDict(extra="allow")

    id: str
    content: str
    created_at: Optional[str] = None
