"""
Vote schemas.

A vote exists client-side only as the has_voted flag on a wish plus the
opaque vote id returned on creation, which is needed to delete it.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class VoteCheck(BaseModel):
    """Whether an identity has voted on a wish."""

    has_voted: bool = False
    vote_id: Optional[str] = None


class VoteCreated(BaseModel):
    """Response after successfully casting a vote."""

    model_config = ConfigDict(extra="allow")

    id: str
    wish_id: Optional[str] = None


class VoteCreate(BaseModel):
    """Schema for casting a vote."""

    wish_id: str
    fingerprint: str
    voter_email: Optional[str] = None
