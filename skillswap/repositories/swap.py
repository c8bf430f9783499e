from collections.abc import Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from skillswap.db.utils import count_rows
from skillswap.models.base import utcnow
from skillswap.models.swap import OPEN_STATUSES, SwapRequest, SwapStatus


class SwapRepository:
    """
    Data access for SwapRequest. Every state change is a conditional write:
    the current status is part of the WHERE clause, so of two racing writers
    exactly one sees its row updated.
    """

    # Status -> the timestamp column stamped the first time it is reached
    _STAMPS = {
        SwapStatus.ACCEPTED: "accepted_at",
        SwapStatus.REJECTED: "rejected_at",
        SwapStatus.COMPLETED: "completed_at",
    }

    def __init__(self, session: AsyncSession):
        self.session = session

    # --- 1. Single record access ---

    async def get_by_id(self, swap_id: int) -> SwapRequest | None:
        """Retrieves a SwapRequest with both parties loaded, always re-reading the row."""
        return await self.session.get(SwapRequest, swap_id, populate_existing=True)

    async def find_open(
        self, requester_id: int, receiver_id: int, skill_offered: str, skill_wanted: str
    ) -> SwapRequest | None:
        stmt = select(SwapRequest).where(
            SwapRequest.requester_id == requester_id,
            SwapRequest.receiver_id == receiver_id,
            SwapRequest.skill_offered == skill_offered,
            SwapRequest.skill_wanted == skill_wanted,
            SwapRequest.status.in_([s.value for s in OPEN_STATUSES]),
        )
        return (await self.session.scalars(stmt)).first()

    async def create(self, create_data: dict[str, Any]) -> SwapRequest:
        """
        Inserts a pending request. Raises IntegrityError when an open request
        with the same (requester, receiver, skill_offered, skill_wanted) exists.
        """
        swap = SwapRequest(**create_data, status=SwapStatus.PENDING.value)
        self.session.add(swap)
        await self.session.flush()
        return swap

    # --- 2. Conditional state changes ---

    async def transition(
        self,
        swap_id: int,
        from_statuses: Sequence[SwapStatus],
        to_status: SwapStatus,
        extra_values: dict[str, Any] | None = None,
    ) -> bool:
        """
        Moves a request to `to_status` only if it is currently in one of
        `from_statuses`. The matching timestamp is stamped only when unset.

        Returns:
            True if this call performed the transition, False if the row was
            missing or already in another state.
        """
        values: dict[str, Any] = {"status": to_status.value, "updated_at": utcnow()}
        stamp = self._STAMPS.get(to_status)
        if stamp:
            column = getattr(SwapRequest, stamp)
            values[stamp] = func.coalesce(column, utcnow())
        if extra_values:
            values.update(extra_values)

        stmt = (
            update(SwapRequest)
            .where(SwapRequest.id == swap_id, SwapRequest.status.in_([s.value for s in from_statuses]))
            .values(**values)
            .returning(SwapRequest.id)
            .execution_options(synchronize_session=False)
        )
        return (await self.session.execute(stmt)).scalar_one_or_none() is not None

    async def delete_unless_completed(self, swap_id: int) -> bool:
        stmt = (
            delete(SwapRequest)
            .where(SwapRequest.id == swap_id, SwapRequest.status != SwapStatus.COMPLETED.value)
            .returning(SwapRequest.id)
            .execution_options(synchronize_session=False)
        )
        deleted = (await self.session.execute(stmt)).scalar_one_or_none() is not None
        if deleted:
            cached = await self.session.get(SwapRequest, swap_id)
            if cached is not None:
                self.session.expunge(cached)
        return deleted

    async def cancel_pending_for_user(self, user_id: int) -> Sequence[tuple[int, int, int]]:
        """
        Bulk-cancels every pending request where the user is either party, in a
        single UPDATE.

        Returns:
            (id, requester_id, receiver_id) for each cancelled request.
        """
        stmt = (
            update(SwapRequest)
            .where(
                or_(SwapRequest.requester_id == user_id, SwapRequest.receiver_id == user_id),
                SwapRequest.status == SwapStatus.PENDING.value,
            )
            .values(status=SwapStatus.CANCELLED.value, updated_at=utcnow())
            .returning(SwapRequest.id, SwapRequest.requester_id, SwapRequest.receiver_id)
            .execution_options(synchronize_session=False)
        )
        return [tuple(row) for row in (await self.session.execute(stmt)).all()]

    # --- 3. Listing ---

    async def list_for_user(
        self, user_id: int, *, sent: bool, received: bool, status: SwapStatus | None, offset: int, limit: int
    ) -> tuple[Sequence[SwapRequest], int]:
        stmt = select(SwapRequest)
        if sent and not received:
            stmt = stmt.where(SwapRequest.requester_id == user_id)
        elif received and not sent:
            stmt = stmt.where(SwapRequest.receiver_id == user_id)
        else:
            stmt = stmt.where(or_(SwapRequest.requester_id == user_id, SwapRequest.receiver_id == user_id))
        if status is not None:
            stmt = stmt.where(SwapRequest.status == status.value)

        total = await count_rows(self.session, stmt)
        stmt = stmt.order_by(SwapRequest.created_at.desc(), SwapRequest.id.desc()).offset(offset).limit(limit)
        return (await self.session.scalars(stmt)).all(), total

    async def list_all(
        self, *, status: SwapStatus | None, offset: int, limit: int
    ) -> tuple[Sequence[SwapRequest], int]:
        stmt = select(SwapRequest)
        if status is not None:
            stmt = stmt.where(SwapRequest.status == status.value)
        total = await count_rows(self.session, stmt)
        stmt = stmt.order_by(SwapRequest.created_at.desc(), SwapRequest.id.desc()).offset(offset).limit(limit)
        return (await self.session.scalars(stmt)).all(), total

    async def recent_for_user(self, user_id: int, limit: int = 5) -> Sequence[SwapRequest]:
        stmt = (
            select(SwapRequest)
            .where(or_(SwapRequest.requester_id == user_id, SwapRequest.receiver_id == user_id))
            .order_by(SwapRequest.updated_at.desc(), SwapRequest.id.desc())
            .limit(limit)
        )
        return (await self.session.scalars(stmt)).all()

    async def reviews_for_user(self, user_id: int, *, offset: int, limit: int) -> tuple[Sequence[SwapRequest], int]:
        """Completed swaps involving the user that carry non-empty feedback."""
        stmt = select(SwapRequest).where(
            or_(SwapRequest.requester_id == user_id, SwapRequest.receiver_id == user_id),
            SwapRequest.status == SwapStatus.COMPLETED.value,
            SwapRequest.feedback.is_not(None),
            SwapRequest.feedback != "",
        )
        total = await count_rows(self.session, stmt)
        stmt = stmt.order_by(SwapRequest.completed_at.desc(), SwapRequest.id.desc()).offset(offset).limit(limit)
        return (await self.session.scalars(stmt)).all(), total

    # --- 4. Aggregates ---

    async def count_by_status(self, user_id: int | None = None) -> dict[str, int]:
        """
        GROUP BY status over the user's requests (either party), or over all
        requests when no user is given.
        """
        stmt = select(SwapRequest.status, func.count(SwapRequest.id)).group_by(SwapRequest.status)
        if user_id is not None:
            stmt = stmt.where(or_(SwapRequest.requester_id == user_id, SwapRequest.receiver_id == user_id))
        return {status: count for status, count in (await self.session.execute(stmt)).all()}

    async def count(self, *, status: SwapStatus | None = None, created_since: datetime | None = None) -> int:
        stmt = select(func.count(SwapRequest.id))
        if status is not None:
            stmt = stmt.where(SwapRequest.status == status.value)
        if created_since is not None:
            stmt = stmt.where(SwapRequest.created_at >= created_since)
        return (await self.session.scalar(stmt)) or 0

    async def report_rows(self) -> Sequence[tuple[str, datetime, int | None]]:
        """(status, created_at, rating) for every request."""
        stmt = select(SwapRequest.status, SwapRequest.created_at, SwapRequest.rating)
        return [tuple(row) for row in (await self.session.execute(stmt)).all()]
