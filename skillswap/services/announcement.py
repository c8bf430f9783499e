import logging
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from skillswap.core.principal import Principal
from skillswap.repositories import AnnouncementRepository
from skillswap.schemas import AnnouncementRequest, AnnouncementResponse
from skillswap.services.access import require_admin

logger = logging.getLogger(__name__)


class AnnouncementService:
    def __init__(self, session: AsyncSession, announcement_repo: AnnouncementRepository):
        self._session = session
        self._announcement_repo = announcement_repo

    async def create(self, admin: Principal, data: AnnouncementRequest) -> AnnouncementResponse:
        require_admin(admin)
        async with self._session.begin():
            announcement = await self._announcement_repo.create(
                {
                    "title": data.title,
                    "message": data.message,
                    "type": data.type.value,
                    "expires_at": data.expires_at,
                    "created_by": admin.id,
                }
            )
            response = AnnouncementResponse.model_validate(announcement)

        logger.info("Announcement %s published by admin %s", response.id, admin.id)
        return response

    async def list_active(self, now: datetime | None = None) -> list[AnnouncementResponse]:
        async with self._session.begin():
            announcements = await self._announcement_repo.list_active(now or datetime.now(UTC))
            return [AnnouncementResponse.model_validate(a) for a in announcements]

    async def purge_expired(self, now: datetime | None = None) -> int:
        """Deletes announcements past their expiry; returns how many went."""
        async with self._session.begin():
            purged = await self._announcement_repo.delete_expired(now or datetime.now(UTC))
        if purged:
            logger.info("Purged %d expired announcements", purged)
        return purged
