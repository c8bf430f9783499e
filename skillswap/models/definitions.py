from enum import Enum as PyEnum

from sqlalchemy import JSON, Boolean, Float, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin

DEFAULT_RATING = 5.0


class Availability(str, PyEnum):
    WEEKDAYS = "Weekdays"
    WEEKENDS = "Weekends"
    EVENINGS = "Evenings"
    MORNINGS = "Mornings"


# --- CORE IDENTITY ENTITY ---


class User(Base, TimestampMixin):
    """
    The User Table (T_User).
    Holds identity, the public profile, the skill sets used by swap requests,
    moderation flags and the running rating state.

    Rating invariant: rating == round(rating_sum / total_ratings, 1) whenever
    total_ratings > 0. These three columns are only written by the rating
    aggregator.
    """

    __tablename__ = "users"
    __table_args__ = (Index("ix_users_public_banned", "is_public", "is_banned"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, comment="Unique User ID.")

    email: Mapped[str] = mapped_column(
        String(254),
        nullable=False,
        unique=True,
        index=True,
        comment="Lowercased unique email address.",
    )
    name: Mapped[str] = mapped_column(String(50), nullable=False, comment="Display name.")
    location: Mapped[str | None] = mapped_column(String(100), nullable=True)
    bio: Mapped[str | None] = mapped_column(String(500), nullable=True)
    profile_photo: Mapped[str | None] = mapped_column(
        String(255), nullable=True, comment="Opaque reference to the stored profile photo."
    )

    skills_offered: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    skills_wanted: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    availability: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    is_public: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_banned: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    rating: Mapped[float] = mapped_column(Float, default=DEFAULT_RATING, nullable=False)
    total_ratings: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    rating_sum: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
