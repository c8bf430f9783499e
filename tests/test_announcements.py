"""Tests for platform announcements."""

from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError as SchemaValidationError

from skillswap.exceptions import ForbiddenError
from skillswap.models.announcement import AnnouncementType
from skillswap.schemas import AnnouncementRequest


class TestAnnouncements:
    async def test_admin_publishes(self, services, admin) -> None:
        created = await services.announcements.create(
            admin, AnnouncementRequest(title=" Maintenance ", message="Down at noon", type=AnnouncementType.WARNING)
        )
        assert created.title == "Maintenance"
        assert created.type is AnnouncementType.WARNING
        assert created.created_by == admin.id
        assert created.is_active

    async def test_non_admin_forbidden(self, services, alice) -> None:
        with pytest.raises(ForbiddenError):
            await services.announcements.create(alice, AnnouncementRequest(title="Hi", message="there"))

    def test_limits(self) -> None:
        with pytest.raises(SchemaValidationError):
            AnnouncementRequest(title="x" * 101, message="m")
        with pytest.raises(SchemaValidationError):
            AnnouncementRequest(title="t", message="")

    async def test_expired_are_hidden_and_purged(self, services, admin) -> None:
        now = datetime.now(UTC)
        keep = await services.announcements.create(admin, AnnouncementRequest(title="Forever", message="m"))
        soon = await services.announcements.create(
            admin, AnnouncementRequest(title="Soon", message="m", expires_at=now + timedelta(hours=1))
        )
        await services.announcements.create(
            admin, AnnouncementRequest(title="Gone", message="m", expires_at=now - timedelta(hours=1))
        )

        active = await services.announcements.list_active(now)
        assert {a.id for a in active} == {keep.id, soon.id}

        assert await services.announcements.purge_expired(now) == 1
        later = now + timedelta(hours=2)
        assert [a.id for a in await services.announcements.list_active(later)] == [keep.id]
        assert await services.announcements.purge_expired(later) == 1
