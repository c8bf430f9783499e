from datetime import datetime
from enum import Enum as PyEnum

from pydantic import BaseModel, Field, field_validator

from skillswap.models.swap import SwapStatus

from .common import PageRequest
from .user import UserSummary


class SwapListKind(str, PyEnum):
    SENT = "sent"
    RECEIVED = "received"
    ALL = "all"


# --- Input Schemas ---


class SwapCreateRequest(BaseModel):
    receiver_id: int = Field(..., description="User being asked to swap")
    skill_offered: str = Field(..., min_length=1, max_length=100, description="Requester's skill on offer")
    skill_wanted: str = Field(..., min_length=1, max_length=100, description="Receiver's skill being asked for")
    message: str | None = Field(default=None, max_length=1000)

    @field_validator("skill_offered", "skill_wanted", "message", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value


class SwapCompleteRequest(BaseModel):
    rating: int = Field(..., ge=1, le=5, description="Rating given to the other party")
    feedback: str | None = Field(default=None, max_length=500)

    @field_validator("feedback", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value


class SwapListQuery(PageRequest):
    kind: SwapListKind = SwapListKind.ALL
    status: SwapStatus | None = None
    limit: int = Field(default=20, ge=1, le=50)


# --- Output Schemas ---


class SwapResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    requester: UserSummary
    receiver: UserSummary
    skill_offered: str
    skill_wanted: str
    message: str | None = None
    status: SwapStatus
    rating: int | None = None
    feedback: str | None = None
    accepted_at: datetime | None = None
    rejected_at: datetime | None = None
    completed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class SwapStats(BaseModel):
    """Swap counts per status; `total` is always the sum of the rest."""

    total: int = 0
    pending: int = 0
    accepted: int = 0
    completed: int = 0
    rejected: int = 0
    cancelled: int = 0


class SwapDashboard(BaseModel):
    stats: SwapStats
    recent_activity: list[SwapResponse]
