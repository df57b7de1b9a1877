from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from weapon_market.config import settings


class Base(DeclarativeBase):
    pass


def make_engine(database_url: str) -> AsyncEngine:
    # Convert postgresql:// to postgresql+asyncpg://
    url = database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    options: dict = {"echo": False, "pool_pre_ping": True}  # type: ignore[type-arg]
    if url.startswith("postgresql"):
        options.update(pool_size=10, max_overflow=20)
    return create_async_engine(url, **options)


def make_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=bind, expire_on_commit=False, autoflush=False)


engine = make_engine(settings.database_url)
AsyncSessionLocal = make_session_factory(engine)


async def create_schema(bind: AsyncEngine) -> None:
    """Create all tables directly; deployments use the Alembic migrations."""
    from weapon_market.infrastructure.database import models  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
