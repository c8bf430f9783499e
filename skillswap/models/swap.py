from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin
from .definitions import User


class SwapStatus(str, PyEnum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# A request in one of these states blocks an identical new one.
OPEN_STATUSES = (SwapStatus.PENDING, SwapStatus.ACCEPTED)
TERMINAL_STATUSES = (SwapStatus.REJECTED, SwapStatus.COMPLETED, SwapStatus.CANCELLED)

_OPEN_FILTER = text("status IN ('pending', 'accepted')")


class SwapRequest(Base, TimestampMixin):
    """
    The Swap Request Table (T_SwapRequest).
    One offer from a requester to a receiver to trade one skill for another.

    The partial unique index allows at most one open request per
    (requester, receiver, skill_offered, skill_wanted); closed requests do not
    count, so the same tuple can be requested again once the earlier one is done.
    """

    __tablename__ = "swap_requests"
    __table_args__ = (
        Index("ix_swap_requests_requester_status", "requester_id", "status"),
        Index("ix_swap_requests_receiver_status", "receiver_id", "status"),
        Index(
            "uq_swap_requests_open_tuple",
            "requester_id",
            "receiver_id",
            "skill_offered",
            "skill_wanted",
            unique=True,
            sqlite_where=_OPEN_FILTER,
            postgresql_where=_OPEN_FILTER,
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, comment="Unique Swap Request ID.")

    requester_id: Mapped[int] = mapped_column(ForeignKey(User.id), nullable=False, comment="User making the offer.")
    receiver_id: Mapped[int] = mapped_column(ForeignKey(User.id), nullable=False, comment="User asked to swap.")

    skill_offered: Mapped[str] = mapped_column(String(100), nullable=False)
    skill_wanted: Mapped[str] = mapped_column(String(100), nullable=False)
    message: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    status: Mapped[SwapStatus] = mapped_column(
        String(20), nullable=False, default=SwapStatus.PENDING.value, index=True
    )

    # --- Completion data (written once, by the complete transition) ---
    rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    feedback: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # --- Monotonic transition stamps ---
    accepted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rejected_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    requester = relationship("User", foreign_keys=[requester_id], lazy="joined")
    receiver = relationship("User", foreign_keys=[receiver_id], lazy="joined")
