from sqlalchemy.ext.asyncio import AsyncSession

from skillswap.core.principal import Principal
from skillswap.exceptions.http import NotFoundError
from skillswap.repositories import SwapRepository, UserRepository
from skillswap.schemas import (
    DirectoryFilters,
    Page,
    PageRequest,
    Pagination,
    ProfileView,
    PublicProfile,
    SkillCount,
    SwapResponse,
)
from skillswap.services.stats import build_swap_stats, tally_skills

MAX_SKILL_SUGGESTIONS = 20


class DirectoryService:
    """
    Read-only discovery over public, non-banned users. Banned and private
    profiles look exactly like missing ones to everybody but their owner.
    """

    def __init__(self, session: AsyncSession, user_repo: UserRepository, swap_repo: SwapRepository):
        self._session = session
        self._user_repo = user_repo
        self._swap_repo = swap_repo

    async def search_users(
        self, filters: DirectoryFilters | None = None, viewer: Principal | None = None
    ) -> Page[PublicProfile]:
        filters = filters or DirectoryFilters()
        async with self._session.begin():
            users, total = await self._user_repo.search_public(
                exclude_id=viewer.id if viewer else None,
                search=filters.search,
                skill=filters.skill,
                availability=filters.availability.value if filters.availability else None,
                location=filters.location,
                offset=filters.offset,
                limit=filters.limit,
            )
            items = [PublicProfile.model_validate(user) for user in users]
        return Page[PublicProfile](items=items, pagination=Pagination.build(filters.page, filters.limit, total))

    async def get_profile(self, user_id: int, viewer: Principal | None = None) -> ProfileView:
        async with self._session.begin():
            user = await self._user_repo.get_by_id(user_id)
            if not user or user.is_banned:
                raise NotFoundError("User not found.")
            if not user.is_public and (viewer is None or viewer.id != user_id):
                raise NotFoundError("User profile is private.")

            stats = build_swap_stats(await self._swap_repo.count_by_status(user_id))
            return ProfileView(
                profile=PublicProfile.model_validate(user),
                swap_stats=stats,
                completed_swaps=stats.completed,
            )

    async def get_reviews(self, user_id: int, page: PageRequest | None = None) -> Page[SwapResponse]:
        page = page or PageRequest(limit=10)
        async with self._session.begin():
            swaps, total = await self._swap_repo.reviews_for_user(user_id, offset=page.offset, limit=page.limit)
            items = [SwapResponse.model_validate(swap) for swap in swaps]
        return Page[SwapResponse](items=items, pagination=Pagination.build(page.page, page.limit, total))

    async def skill_suggestions(self, q: str | None = None) -> list[SkillCount]:
        """Skills offered or wanted by discoverable users, for autocomplete."""
        async with self._session.begin():
            rows = await self._user_repo.get_skill_lists(public_only=True, include_wanted=True)

        needle = q.strip().lower() if q else ""
        skill_lists = (
            [skill for skill in offered + wanted if needle in skill.lower()] for offered, wanted in rows
        )
        return tally_skills(skill_lists, limit=MAX_SKILL_SUGGESTIONS)
