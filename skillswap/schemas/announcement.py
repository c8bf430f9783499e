from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from skillswap.models.announcement import AnnouncementType


class AnnouncementRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    message: str = Field(..., min_length=1, max_length=1000)
    type: AnnouncementType = AnnouncementType.INFO
    expires_at: datetime | None = Field(default=None, description="Announcement disappears after this instant")

    @field_validator("title", "message", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value


class AnnouncementResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    title: str
    message: str
    type: AnnouncementType
    is_active: bool
    created_by: int | None
    expires_at: datetime | None = None
    created_at: datetime
