from collections.abc import Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import ColumnElement, Integer, cast, exists, func, or_, select, update
from sqlalchemy.exc import NoResultFound
from sqlalchemy.ext.asyncio import AsyncSession

from skillswap.db.utils import apply_dict_updates, count_rows, escape_like
from skillswap.models.definitions import User


def _any_element(column, pattern: str, *, exact: bool = False) -> ColumnElement[bool]:
    """True when some entry of the JSON list in `column` matches `pattern`."""
    element = func.json_each(column).table_valued("value").alias()
    condition = element.c.value == pattern if exact else element.c.value.ilike(pattern, escape="\\")
    return exists(select(1).select_from(element).where(condition))


class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: int) -> User | None:
        """Retrieves a User by primary ID, always re-reading the row."""
        return await self.session.get(User, user_id, populate_existing=True)

    async def get_by_email(self, email: str) -> User | None:
        """Retrieves a User by their unique email, case-insensitively."""
        stmt = select(User).where(User.email == email.strip().lower())
        return (await self.session.scalars(stmt)).one_or_none()

    async def get_many(self, user_ids: Sequence[int]) -> Sequence[User]:
        if not user_ids:
            return []
        stmt = select(User).where(User.id.in_(set(user_ids)))
        return (await self.session.scalars(stmt)).all()

    async def create(self, create_data: dict[str, Any]) -> User:
        """Creates a new User record and persists it."""
        sensitive_fields = {"id", "created_at", "rating", "rating_sum", "total_ratings"}
        user = User()
        apply_dict_updates(user, create_data, sensitive_fields)
        self.session.add(user)
        await self.session.flush()
        return user

    async def update(self, user_id: int, update_data: dict[str, Any]) -> User | None:
        """
        Updates profile fields. Identity, moderation flags and rating state
        cannot be changed through this path.
        """

        user_to_update = await self.get_by_id(user_id)
        if not user_to_update:
            return None

        sensitive_fields = {
            "id",
            "email",
            "created_at",
            "is_admin",
            "is_banned",
            "rating",
            "rating_sum",
            "total_ratings",
        }
        apply_dict_updates(entity=user_to_update, update_data=update_data, excluded_attrs=sensitive_fields)

        await self.session.flush()
        await self.session.refresh(user_to_update)

        return user_to_update

    async def set_moderation_flags(self, user_id: int, *, is_banned: bool, is_public: bool) -> User | None:
        user = await self.get_by_id(user_id)
        if not user:
            return None
        user.is_banned = is_banned
        user.is_public = is_public
        await self.session.flush()
        return user

    # --- Rating state ---

    async def increment_rating_totals(self, user_id: int, rating: int) -> tuple[int, int]:
        """
        CRITICAL: Atomically adds one rating to the running sum and count.
        The UPDATE holds the row lock until the caller's transaction ends.

        Returns:
            The post-increment (rating_sum, total_ratings).

        Raises:
            NoResultFound: If the user does not exist.
        """
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(rating_sum=User.rating_sum + rating, total_ratings=User.total_ratings + 1)
            .returning(User.rating_sum, User.total_ratings)
            .execution_options(synchronize_session=False)
        )
        row = (await self.session.execute(stmt)).one_or_none()
        if row is None:
            raise NoResultFound(f"User with ID {user_id} not found for rating update.")
        return row.rating_sum, row.total_ratings

    async def set_rating(self, user_id: int, rating: float) -> User:
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(rating=rating)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)
        user = await self.get_by_id(user_id)
        if user is None:
            raise NoResultFound(f"User with ID {user_id} not found for rating update.")
        return user

    # --- Directory and reporting queries ---

    async def search_public(
        self,
        *,
        exclude_id: int | None,
        search: str | None,
        skill: str | None,
        availability: str | None,
        location: str | None,
        offset: int,
        limit: int,
    ) -> tuple[Sequence[User], int]:
        """
        Public, non-banned users matching the optional filters, best rated first.
        Skill and availability filters match individual entries of the JSON lists.
        """
        stmt = select(User).where(User.is_public.is_(True), User.is_banned.is_(False))

        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        if search:
            pattern = f"%{escape_like(search)}%"
            stmt = stmt.where(
                or_(
                    User.name.ilike(pattern, escape="\\"),
                    User.location.ilike(pattern, escape="\\"),
                    User.bio.ilike(pattern, escape="\\"),
                )
            )
        if skill:
            pattern = f"%{escape_like(skill)}%"
            stmt = stmt.where(
                or_(
                    _any_element(User.skills_offered, pattern),
                    _any_element(User.skills_wanted, pattern),
                )
            )
        if availability:
            stmt = stmt.where(_any_element(User.availability, availability, exact=True))
        if location:
            stmt = stmt.where(User.location.ilike(f"%{escape_like(location)}%", escape="\\"))

        total = await count_rows(self.session, stmt)
        stmt = stmt.order_by(User.rating.desc(), User.created_at.desc(), User.id.desc()).offset(offset).limit(limit)
        return (await self.session.scalars(stmt)).all(), total

    async def list_for_admin(
        self, *, search: str | None, status: str, offset: int | None = None, limit: int | None = None
    ) -> tuple[Sequence[User], int]:
        """Non-admin users, newest first, filtered by moderation status (all/active/banned/private)."""
        stmt = select(User).where(User.is_admin.is_(False))

        if search:
            pattern = f"%{escape_like(search)}%"
            stmt = stmt.where(
                or_(
                    User.name.ilike(pattern, escape="\\"),
                    User.email.ilike(pattern, escape="\\"),
                    User.location.ilike(pattern, escape="\\"),
                )
            )
        if status == "active":
            stmt = stmt.where(User.is_banned.is_(False), User.is_public.is_(True))
        elif status == "banned":
            stmt = stmt.where(User.is_banned.is_(True))
        elif status == "private":
            stmt = stmt.where(User.is_public.is_(False), User.is_banned.is_(False))

        total = await count_rows(self.session, stmt)
        stmt = stmt.order_by(User.created_at.desc(), User.id.desc())
        if offset is not None:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        return (await self.session.scalars(stmt)).all(), total

    async def count_flags(self) -> dict[str, int]:
        stmt = select(
            func.count(User.id),
            func.coalesce(func.sum(cast(User.is_public, Integer)), 0),
            func.coalesce(func.sum(cast(User.is_banned, Integer)), 0),
            func.coalesce(func.sum(cast(User.is_admin, Integer)), 0),
        )
        total, public, banned, admins = (await self.session.execute(stmt)).one()
        return {"total_users": total, "public_users": public, "banned_users": banned, "admin_users": admins}

    async def count(
        self,
        *,
        is_admin: bool | None = None,
        is_public: bool | None = None,
        is_banned: bool | None = None,
        created_since: datetime | None = None,
    ) -> int:
        stmt = select(func.count(User.id))
        if is_admin is not None:
            stmt = stmt.where(User.is_admin.is_(is_admin))
        if is_public is not None:
            stmt = stmt.where(User.is_public.is_(is_public))
        if is_banned is not None:
            stmt = stmt.where(User.is_banned.is_(is_banned))
        if created_since is not None:
            stmt = stmt.where(User.created_at >= created_since)
        return (await self.session.scalar(stmt)) or 0

    async def get_skill_lists(
        self, *, public_only: bool, exclude_admins: bool = False, include_wanted: bool = False
    ) -> Sequence[tuple[list[str], list[str]]]:
        """Raw (offered, wanted) skill lists, for in-memory skill tallies."""
        stmt = select(User.skills_offered, User.skills_wanted)
        if public_only:
            stmt = stmt.where(User.is_public.is_(True), User.is_banned.is_(False))
        if exclude_admins:
            stmt = stmt.where(User.is_admin.is_(False))
        rows = (await self.session.execute(stmt)).all()
        return [(offered or [], (wanted or []) if include_wanted else []) for offered, wanted in rows]
