import logging
from collections.abc import Sequence

from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from skillswap.core.principal import Principal
from skillswap.exceptions.http import (
    ConflictError,
    ForbiddenError,
    InvalidOperationError,
    NotFoundError,
    ValidationError,
)
from skillswap.models.swap import OPEN_STATUSES, SwapRequest, SwapStatus
from skillswap.repositories import SwapRepository, UserRepository
from skillswap.schemas import (
    Page,
    Pagination,
    SwapCompleteRequest,
    SwapCreateRequest,
    SwapListKind,
    SwapListQuery,
    SwapResponse,
)
from skillswap.services.access import require_active
from skillswap.services.events import SwapCompleted
from skillswap.services.rating import RatingService

logger = logging.getLogger(__name__)


class SwapService:
    """
    Owns the swap request lifecycle:

        pending -> accepted | rejected | cancelled
        accepted -> completed | cancelled

    rejected, completed and cancelled are terminal. Each operation runs in its
    own transaction and performs its state change as a conditional write, so a
    caller that loses a race sees the winner's state instead of overwriting it.
    """

    def __init__(
        self,
        session: AsyncSession,
        swap_repo: SwapRepository,
        user_repo: UserRepository,
        rating_service: RatingService,
    ):
        self._session = session
        self._swap_repo = swap_repo
        self._user_repo = user_repo
        self._rating_service = rating_service

    # --- 1. CREATION ---

    async def create_request(self, actor: Principal, data: SwapCreateRequest) -> SwapResponse:
        """
        Creates a pending request. Preconditions are checked in order and the
        first failure wins; the open-request unique index is the final word on
        duplicates.
        """
        require_active(actor)

        try:
            async with self._session.begin():
                receiver = await self._user_repo.get_by_id(data.receiver_id)
                if not receiver or receiver.is_banned or not receiver.is_public:
                    raise NotFoundError("Receiver not found or unavailable.")

                if actor.id == data.receiver_id:
                    raise InvalidOperationError("Cannot send swap request to yourself.")

                requester = await self._user_repo.get_by_id(actor.id)
                if not requester:
                    raise NotFoundError("Requester not found.")

                if data.skill_offered not in requester.skills_offered:
                    raise InvalidOperationError("You do not have the offered skill in your profile.")

                if data.skill_wanted not in receiver.skills_offered:
                    raise InvalidOperationError("Receiver does not offer the requested skill.")

                if await self._swap_repo.find_open(actor.id, receiver.id, data.skill_offered, data.skill_wanted):
                    raise ConflictError("An open request for these skills already exists with this user.")

                created = await self._swap_repo.create(
                    {
                        "requester_id": actor.id,
                        "receiver_id": receiver.id,
                        "skill_offered": data.skill_offered,
                        "skill_wanted": data.skill_wanted,
                        "message": data.message,
                    }
                )
                swap = await self._swap_repo.get_by_id(created.id)
                response = SwapResponse.model_validate(swap)
        except IntegrityError as exc:
            logger.warning("Duplicate open swap request from user %s to %s", actor.id, data.receiver_id)
            raise ConflictError("An open request for these skills already exists with this user.") from exc

        logger.info("Swap request %s created: %s -> %s", response.id, actor.id, data.receiver_id)
        return response

    # --- 2. RECEIVER DECISIONS ---

    async def accept_request(self, request_id: int, actor: Principal) -> SwapResponse:
        return await self._receiver_decision(request_id, actor, SwapStatus.ACCEPTED)

    async def reject_request(self, request_id: int, actor: Principal) -> SwapResponse:
        return await self._receiver_decision(request_id, actor, SwapStatus.REJECTED)

    async def _receiver_decision(self, request_id: int, actor: Principal, target: SwapStatus) -> SwapResponse:
        require_active(actor)

        async with self._session.begin():
            swap = await self._load(request_id)
            if swap.receiver_id != actor.id:
                verb = "accept" if target is SwapStatus.ACCEPTED else "reject"
                raise ForbiddenError(f"Only the receiver can {verb} this request.")
            if swap.status != SwapStatus.PENDING:
                raise InvalidOperationError("Request is not pending.")

            if not await self._swap_repo.transition(request_id, [SwapStatus.PENDING], target):
                await self._lost_race(request_id, "Request is not pending.")

            response = SwapResponse.model_validate(await self._swap_repo.get_by_id(request_id))

        logger.info("Swap request %s %s by user %s", request_id, target.value, actor.id)
        return response

    # --- 3. COMPLETION (status change + counterpart rating, one transaction) ---

    async def complete_request(
        self, request_id: int, actor: Principal, rating: int, feedback: str | None = None
    ) -> SwapResponse:
        require_active(actor)
        try:
            data = SwapCompleteRequest(rating=rating, feedback=feedback)
        except SchemaValidationError as exc:
            raise ValidationError("Rating must be between 1 and 5 and feedback at most 500 characters.") from exc

        async with self._session.begin():
            swap = await self._load(request_id)
            if actor.id not in (swap.requester_id, swap.receiver_id):
                raise ForbiddenError("Access denied.")
            if swap.status != SwapStatus.ACCEPTED:
                raise InvalidOperationError("Request must be accepted before completion.")

            completed = await self._swap_repo.transition(
                request_id,
                [SwapStatus.ACCEPTED],
                SwapStatus.COMPLETED,
                {"rating": data.rating, "feedback": data.feedback},
            )
            if not completed:
                await self._lost_race(request_id, "Request must be accepted before completion.")

            rated_user_id = swap.receiver_id if actor.id == swap.requester_id else swap.requester_id
            await self._rating_service.handle_swap_completed(
                SwapCompleted(request_id=request_id, rated_user_id=rated_user_id, rating=data.rating)
            )

            response = SwapResponse.model_validate(await self._swap_repo.get_by_id(request_id))

        logger.info("Swap request %s completed by user %s, rated user %s", request_id, actor.id, rated_user_id)
        return response

    # --- 4. REQUESTER WITHDRAWAL ---

    async def cancel_request(self, request_id: int, actor: Principal) -> SwapResponse:
        """Withdraws an open request, keeping the record as `cancelled`."""
        require_active(actor)

        async with self._session.begin():
            swap = await self._load(request_id)
            if swap.requester_id != actor.id:
                raise ForbiddenError("Only the requester can cancel this request.")
            if swap.status not in OPEN_STATUSES:
                raise InvalidOperationError(f"Cannot cancel a {swap.status} swap.")

            if not await self._swap_repo.transition(request_id, OPEN_STATUSES, SwapStatus.CANCELLED):
                await self._lost_race(request_id, "Request is no longer open.")

            response = SwapResponse.model_validate(await self._swap_repo.get_by_id(request_id))

        logger.info("Swap request %s cancelled by requester %s", request_id, actor.id)
        return response

    async def delete_request(self, request_id: int, actor: Principal) -> None:
        """Removes a request that has not been completed. Requester only."""
        require_active(actor)

        async with self._session.begin():
            swap = await self._load(request_id)
            if swap.requester_id != actor.id:
                raise ForbiddenError("Only the requester can cancel this request.")
            if swap.status == SwapStatus.COMPLETED:
                raise InvalidOperationError("Cannot cancel completed swap.")

            if not await self._swap_repo.delete_unless_completed(request_id):
                await self._lost_race(request_id, "Cannot cancel completed swap.")

        logger.info("Swap request %s deleted by requester %s", request_id, actor.id)

    # --- 5. MODERATION CASCADE ---

    async def cancel_pending_for_user(self, user_id: int) -> Sequence[tuple[int, int, int]]:
        """
        Cancels every pending request the user is a party to with one bulk
        UPDATE. No per-request authorization applies; moderation calls this.
        """
        async with self._session.begin():
            cancelled = await self._swap_repo.cancel_pending_for_user(user_id)

        logger.info("Cancelled %d pending swap requests of user %s", len(cancelled), user_id)
        return cancelled

    # --- 6. QUERIES ---

    async def get_request(self, request_id: int, actor: Principal) -> SwapResponse:
        async with self._session.begin():
            swap = await self._load(request_id)
            if actor.id not in (swap.requester_id, swap.receiver_id):
                raise ForbiddenError("Access denied.")
            return SwapResponse.model_validate(swap)

    async def list_requests(self, actor: Principal, query: SwapListQuery | None = None) -> Page[SwapResponse]:
        query = query or SwapListQuery()
        async with self._session.begin():
            swaps, total = await self._swap_repo.list_for_user(
                actor.id,
                sent=query.kind in (SwapListKind.SENT, SwapListKind.ALL),
                received=query.kind in (SwapListKind.RECEIVED, SwapListKind.ALL),
                status=query.status,
                offset=query.offset,
                limit=query.limit,
            )
            items = [SwapResponse.model_validate(swap) for swap in swaps]
        return Page[SwapResponse](items=items, pagination=Pagination.build(query.page, query.limit, total))

    # --- helpers ---

    async def _load(self, request_id: int) -> SwapRequest:
        swap = await self._swap_repo.get_by_id(request_id)
        if not swap:
            raise NotFoundError("Swap request not found.")
        return swap

    async def _lost_race(self, request_id: int, message: str) -> None:
        """Raises the error matching whatever state the concurrent writer left behind."""
        logger.warning("Concurrent update on swap request %s; conditional write lost", request_id)
        if await self._swap_repo.get_by_id(request_id) is None:
            raise NotFoundError("Swap request not found.")
        raise InvalidOperationError(message)
