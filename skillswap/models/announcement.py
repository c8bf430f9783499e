from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import Boolean, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import AuditMixin, Base


class AnnouncementType(str, PyEnum):
    INFO = "info"
    WARNING = "warning"
    SUCCESS = "success"
    ERROR = "error"


class Announcement(Base, AuditMixin):
    """Platform-wide message published by an admin, optionally expiring."""

    __tablename__ = "announcements"
    __table_args__ = (Index("ix_announcements_active_created", "is_active", "created_at"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    message: Mapped[str] = mapped_column(String(1000), nullable=False)
    type: Mapped[AnnouncementType] = mapped_column(String(10), nullable=False, default=AnnouncementType.INFO.value)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, index=True)
