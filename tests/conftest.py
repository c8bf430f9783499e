from dataclasses import dataclass

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from skillswap.core.config import Settings
from skillswap.core.principal import Principal
from skillswap.db.session import create_session_factory, init_models
from skillswap.repositories import AnnouncementRepository, SwapRepository, UserRepository
from skillswap.schemas import SwapCreateRequest, UserRequest
from skillswap.services import (
    AnnouncementService,
    DirectoryService,
    ModerationService,
    NotificationDispatcher,
    RatingService,
    ReportService,
    StatsService,
    SwapService,
    UserService,
)


class RecordingNotifier:
    def __init__(self):
        self.sent: list[tuple[str, str, str]] = []

    async def send(self, recipient_email: str, subject: str, body: str) -> None:
        self.sent.append((recipient_email, subject, body))


@dataclass
class Services:
    session: AsyncSession
    users: UserService
    swaps: SwapService
    ratings: RatingService
    stats: StatsService
    reports: ReportService
    directory: DirectoryService
    moderation: ModerationService
    announcements: AnnouncementService
    notifier: RecordingNotifier
    dispatcher: NotificationDispatcher


def build_services(session: AsyncSession, notifier=None) -> Services:
    user_repo = UserRepository(session)
    swap_repo = SwapRepository(session)
    ratings = RatingService(user_repo)
    swaps = SwapService(session, swap_repo, user_repo, ratings)
    recorder = notifier or RecordingNotifier()
    dispatcher = NotificationDispatcher(recorder)
    return Services(
        session=session,
        users=UserService(session, user_repo),
        swaps=swaps,
        ratings=ratings,
        stats=StatsService(session, swap_repo),
        reports=ReportService(session, user_repo, swap_repo, Settings()),
        directory=DirectoryService(session, user_repo, swap_repo),
        moderation=ModerationService(session, user_repo, swap_repo, swaps, dispatcher),
        announcements=AnnouncementService(session, AnnouncementRepository(session)),
        notifier=recorder,
        dispatcher=dispatcher,
    )


async def make_user(
    services: Services,
    email: str,
    offered: list[str] | None = None,
    wanted: list[str] | None = None,
    *,
    name: str | None = None,
    is_admin: bool = False,
    is_public: bool = True,
    **profile,
) -> Principal:
    user = await services.users.register_user(
        UserRequest(
            email=email,
            name=name or email.split("@")[0].title(),
            skills_offered=offered or [],
            skills_wanted=wanted or [],
            is_public=is_public,
            **profile,
        )
    )
    if is_admin:
        async with services.session.begin():
            orm_user = await UserRepository(services.session).get_by_id(user.id)
            orm_user.is_admin = True
    return Principal(id=user.id, is_admin=is_admin)


async def send_request(services: Services, requester: Principal, receiver: Principal, offered: str, wanted: str):
    return await services.swaps.create_request(
        requester, SwapCreateRequest(receiver_id=receiver.id, skill_offered=offered, skill_wanted=wanted)
    )


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://", poolclass=StaticPool, connect_args={"check_same_thread": False}
    )
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine):
    factory = create_session_factory(engine)
    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def services(session) -> Services:
    return build_services(session)


@pytest_asyncio.fixture
async def alice(services) -> Principal:
    return await make_user(services, "alice@example.com", ["Cooking", "Spanish"], ["Guitar"])


@pytest_asyncio.fixture
async def bob(services) -> Principal:
    return await make_user(services, "bob@example.com", ["Guitar", "Piano"], ["Cooking"])


@pytest_asyncio.fixture
async def carol(services) -> Principal:
    return await make_user(services, "carol@example.com", ["Yoga"], ["Piano"])


@pytest_asyncio.fixture
async def admin(services) -> Principal:
    return await make_user(services, "admin@example.com", is_admin=True)
