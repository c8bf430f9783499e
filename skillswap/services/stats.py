from collections import Counter
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from skillswap.core.config import Settings, get_settings
from skillswap.core.principal import Principal
from skillswap.models.swap import SwapStatus
from skillswap.repositories import SwapRepository, UserRepository
from skillswap.schemas import (
    ActivityReport,
    AdminDashboard,
    SkillCount,
    SwapDashboard,
    SwapReport,
    SwapResponse,
    SwapStatistics,
    SwapStats,
    UserCounts,
    UserReport,
    UserResponse,
    UserWithStats,
)
from skillswap.services.access import require_admin
from skillswap.services.rating import average_rating


def build_swap_stats(counts: dict[str, int]) -> SwapStats:
    """Folds GROUP BY status rows into the fixed per-status shape."""
    per_status = {status.value: counts.get(status.value, 0) for status in SwapStatus}
    return SwapStats(total=sum(per_status.values()), **per_status)


def tally_skills(skill_lists: Iterable[Iterable[str]], limit: int) -> list[SkillCount]:
    """Most common skills first; ties broken alphabetically."""
    counter: Counter[str] = Counter()
    for skills in skill_lists:
        counter.update(skills)
    ranked = sorted(counter.items(), key=lambda item: (-item[1], item[0]))
    return [SkillCount(skill=skill, count=count) for skill, count in ranked[:limit]]


class StatsService:
    """Per-user swap counts. Read-only."""

    def __init__(self, session: AsyncSession, swap_repo: SwapRepository):
        self._session = session
        self._swap_repo = swap_repo

    async def get_user_stats(self, user_id: int) -> SwapStats:
        async with self._session.begin():
            return build_swap_stats(await self._swap_repo.count_by_status(user_id))

    async def get_swap_stats(self) -> SwapStats:
        async with self._session.begin():
            return build_swap_stats(await self._swap_repo.count_by_status())

    async def get_dashboard(self, actor: Principal, recent_limit: int = 5) -> SwapDashboard:
        async with self._session.begin():
            stats = build_swap_stats(await self._swap_repo.count_by_status(actor.id))
            recent = await self._swap_repo.recent_for_user(actor.id, limit=recent_limit)
            return SwapDashboard(stats=stats, recent_activity=[SwapResponse.model_validate(s) for s in recent])


class ReportService:
    """
    Admin dashboards and reports: grouped counts over users and swaps.
    """

    def __init__(
        self,
        session: AsyncSession,
        user_repo: UserRepository,
        swap_repo: SwapRepository,
        settings: Settings | None = None,
    ):
        self._session = session
        self._user_repo = user_repo
        self._swap_repo = swap_repo
        self._settings = settings or get_settings()

    async def admin_dashboard(self, actor: Principal, now: datetime | None = None) -> AdminDashboard:
        require_admin(actor)
        now = now or datetime.now(UTC)
        since = now - timedelta(days=self._settings.recent_days)

        async with self._session.begin():
            users = UserCounts(**await self._user_repo.count_flags())
            swaps = build_swap_stats(await self._swap_repo.count_by_status())
            recent = await self._user_repo.count(created_since=since)
            skill_rows = await self._user_repo.get_skill_lists(public_only=False)

        return AdminDashboard(
            users=users,
            swaps=swaps,
            recent_registrations=recent,
            top_skills=tally_skills((offered for offered, _ in skill_rows), limit=10),
        )

    async def user_report(self, actor: Principal, now: datetime | None = None) -> UserReport:
        require_admin(actor)
        async with self._session.begin():
            users, total = await self._user_repo.list_for_admin(search=None, status="all")
            rows = [
                UserWithStats(
                    user=UserResponse.model_validate(user),
                    swap_stats=build_swap_stats(await self._swap_repo.count_by_status(user.id)),
                )
                for user in users
            ]
        return UserReport(users=rows, total_users=total, generated_at=now or datetime.now(UTC))

    async def swap_report(self, actor: Principal, now: datetime | None = None) -> SwapReport:
        require_admin(actor)
        async with self._session.begin():
            rows = await self._swap_repo.report_rows()

        statistics = SwapStatistics(total=len(rows))
        rating_sum = 0
        rating_count = 0
        for status, created_at, rating in rows:
            statistics.by_status[status] = statistics.by_status.get(status, 0) + 1
            month = created_at.strftime("%Y-%m")
            statistics.by_month[month] = statistics.by_month.get(month, 0) + 1
            if rating:
                rating_sum += rating
                rating_count += 1

        if rating_count:
            statistics.average_rating = average_rating(rating_sum, rating_count)
            statistics.total_ratings = rating_count

        return SwapReport(statistics=statistics, generated_at=now or datetime.now(UTC))

    async def activity_report(self, actor: Principal, now: datetime | None = None) -> ActivityReport:
        require_admin(actor)
        now = now or datetime.now(UTC)
        month_ago = now - timedelta(days=30)
        week_ago = now - timedelta(days=7)

        async with self._session.begin():
            users = {
                "total": await self._user_repo.count(is_admin=False),
                "active": await self._user_repo.count(is_public=True, is_banned=False),
                "banned": await self._user_repo.count(is_banned=True),
                "new_this_month": await self._user_repo.count(is_admin=False, created_since=month_ago),
                "new_this_week": await self._user_repo.count(is_admin=False, created_since=week_ago),
            }
            swaps = {
                "total": await self._swap_repo.count(),
                "pending": await self._swap_repo.count(status=SwapStatus.PENDING),
                "completed": await self._swap_repo.count(status=SwapStatus.COMPLETED),
                "this_month": await self._swap_repo.count(created_since=month_ago),
                "this_week": await self._swap_repo.count(created_since=week_ago),
            }
            skill_rows = await self._user_repo.get_skill_lists(public_only=True, exclude_admins=True)

        return ActivityReport(
            users=users,
            swaps=swaps,
            top_skills=tally_skills((offered for offered, _ in skill_rows), limit=15),
            generated_at=now,
            period_from=month_ago,
            period_to=now,
        )
