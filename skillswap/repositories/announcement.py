from collections.abc import Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from skillswap.models.announcement import Announcement


class AnnouncementRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, create_data: dict[str, Any]) -> Announcement:
        announcement = Announcement(**create_data)
        self.session.add(announcement)
        await self.session.flush()
        return announcement

    async def list_active(self, now: datetime) -> Sequence[Announcement]:
        stmt = (
            select(Announcement)
            .where(
                Announcement.is_active.is_(True),
                or_(Announcement.expires_at.is_(None), Announcement.expires_at > now),
            )
            .order_by(Announcement.created_at.desc(), Announcement.id.desc())
        )
        return (await self.session.scalars(stmt)).all()

    async def delete_expired(self, now: datetime) -> int:
        stmt = (
            delete(Announcement)
            .where(Announcement.expires_at.is_not(None), Announcement.expires_at <= now)
            .returning(Announcement.id)
            .execution_options(synchronize_session=False)
        )
        return len((await self.session.execute(stmt)).all())
