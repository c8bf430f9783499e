import logging
from collections.abc import Sequence
from enum import Enum as PyEnum

from sqlalchemy.ext.asyncio import AsyncSession

from skillswap.core.principal import Principal
from skillswap.exceptions.http import InvalidOperationError, NotFoundError
from skillswap.models.swap import SwapStatus
from skillswap.repositories import SwapRepository, UserRepository
from skillswap.schemas import BanResult, Page, PageRequest, Pagination, SwapResponse, UserResponse, UserWithStats
from skillswap.services.access import require_admin
from skillswap.services.notification import NotificationDispatcher
from skillswap.services.stats import build_swap_stats
from skillswap.services.swap import SwapService

logger = logging.getLogger(__name__)


class UserStatusFilter(str, PyEnum):
    ALL = "all"
    ACTIVE = "active"
    BANNED = "banned"
    PRIVATE = "private"


class ModerationService:
    """
    Admin-only user moderation. Banning hides the user and cascades into the
    swap lifecycle by cancelling their pending requests.
    """

    def __init__(
        self,
        session: AsyncSession,
        user_repo: UserRepository,
        swap_repo: SwapRepository,
        swap_service: SwapService,
        notifications: NotificationDispatcher | None = None,
    ):
        self._session = session
        self._user_repo = user_repo
        self._swap_repo = swap_repo
        self._swap_service = swap_service
        self._notifications = notifications or NotificationDispatcher()

    # --- 1. BAN / UNBAN ---

    async def ban_user(self, user_id: int, admin: Principal) -> BanResult:
        require_admin(admin)

        async with self._session.begin():
            user = await self._user_repo.get_by_id(user_id)
            if not user:
                raise NotFoundError("User not found.")
            if user.is_admin:
                raise InvalidOperationError("Cannot ban admin users.")
            if user.is_banned:
                raise InvalidOperationError("User is already banned.")

            user = await self._user_repo.set_moderation_flags(user_id, is_banned=True, is_public=False)
            response = UserResponse.model_validate(user)

        logger.info("User %s banned by admin %s", user_id, admin.id)
        cancelled = await self._swap_service.cancel_pending_for_user(user_id)

        await self._notifications.dispatch(
            response.email, "Your account has been suspended", "Your SkillSwap account has been banned."
        )
        await self._notify_counterparties(user_id, cancelled)
        return BanResult(user=response, cancelled_request_ids=[swap_id for swap_id, _, _ in cancelled])

    async def sweep_banned_user(self, user_id: int, admin: Principal) -> list[int]:
        """
        Re-runs the pending-request cascade for an already banned user, for
        when the sweep after the ban did not complete.
        """
        require_admin(admin)
        async with self._session.begin():
            user = await self._user_repo.get_by_id(user_id)
            if not user:
                raise NotFoundError("User not found.")
            if not user.is_banned:
                raise InvalidOperationError("User is not banned.")

        cancelled = await self._swap_service.cancel_pending_for_user(user_id)
        await self._notify_counterparties(user_id, cancelled)
        return [swap_id for swap_id, _, _ in cancelled]

    async def unban_user(self, user_id: int, admin: Principal) -> UserResponse:
        require_admin(admin)

        async with self._session.begin():
            user = await self._user_repo.get_by_id(user_id)
            if not user:
                raise NotFoundError("User not found.")
            if not user.is_banned:
                raise InvalidOperationError("User is not banned.")

            user = await self._user_repo.set_moderation_flags(user_id, is_banned=False, is_public=True)
            response = UserResponse.model_validate(user)

        logger.info("User %s unbanned by admin %s", user_id, admin.id)
        await self._notifications.dispatch(
            response.email, "Your account has been restored", "Your SkillSwap account is active again."
        )
        return response

    # --- 2. MONITORING ---

    async def list_users(
        self,
        admin: Principal,
        search: str | None = None,
        status: UserStatusFilter = UserStatusFilter.ALL,
        page: PageRequest | None = None,
    ) -> Page[UserWithStats]:
        require_admin(admin)
        page = page or PageRequest()

        async with self._session.begin():
            users, total = await self._user_repo.list_for_admin(
                search=search, status=UserStatusFilter(status).value, offset=page.offset, limit=page.limit
            )
            items = [
                UserWithStats(
                    user=UserResponse.model_validate(user),
                    swap_stats=build_swap_stats(await self._swap_repo.count_by_status(user.id)),
                )
                for user in users
            ]
        return Page[UserWithStats](items=items, pagination=Pagination.build(page.page, page.limit, total))

    async def list_swaps(
        self, admin: Principal, status: SwapStatus | None = None, page: PageRequest | None = None
    ) -> Page[SwapResponse]:
        require_admin(admin)
        page = page or PageRequest()

        async with self._session.begin():
            swaps, total = await self._swap_repo.list_all(status=status, offset=page.offset, limit=page.limit)
            items = [SwapResponse.model_validate(swap) for swap in swaps]
        return Page[SwapResponse](items=items, pagination=Pagination.build(page.page, page.limit, total))

    # --- helpers ---

    async def _notify_counterparties(self, banned_user_id: int, cancelled: Sequence[tuple[int, int, int]]) -> None:
        if not cancelled:
            return
        counterpart_of = {
            swap_id: receiver_id if requester_id == banned_user_id else requester_id
            for swap_id, requester_id, receiver_id in cancelled
        }
        async with self._session.begin():
            users = {user.id: user.email for user in await self._user_repo.get_many(list(counterpart_of.values()))}

        for swap_id, counterpart_id in counterpart_of.items():
            email = users.get(counterpart_id)
            if email:
                await self._notifications.dispatch(
                    email,
                    "A swap request was cancelled",
                    f"Swap request #{swap_id} was cancelled because the other member was suspended.",
                )
