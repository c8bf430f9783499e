from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from skillswap.core.config import Settings
from skillswap.models import Base


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    return create_async_engine(settings.database_url, echo=settings.echo_sql)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Sessions keep loaded objects usable after commit; services open their own
    `session.begin()` block per operation.
    """
    return async_sessionmaker(engine, expire_on_commit=False)


async def init_models(engine: AsyncEngine) -> None:
    """Creates every table and index that is missing."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
