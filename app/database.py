from collections.abc import AsyncIterator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.config import settings
from app.middleware import install_query_counter


def build_engine(url: str, **kwargs) -> AsyncEngine:
    """
    Create an async engine that reports into the per-request query counter.

    Extra keyword arguments go straight to ``create_async_engine``; the test
    suite uses them for the SQLite ``StaticPool`` setup.
    """
    engine = create_async_engine(url, echo=settings.DEBUG, pool_pre_ping=True, **kwargs)
    install_query_counter(engine)
    return engine


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Attributes stay loaded after commit so services can serialise them.
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


engine = build_engine(settings.DATABASE_URL)
async_session = build_session_factory(engine)


class Base(DeclarativeBase):
    pass


async def get_db() -> AsyncIterator[AsyncSession]:
    """One session per request: committed when the route returns, rolled back if it raises."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
