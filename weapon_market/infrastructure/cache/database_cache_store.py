from datetime import datetime, timedelta, timezone

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from weapon_market.application.errors import PersistenceError
from weapon_market.application.interfaces.cache_store import CacheStore
from weapon_market.infrastructure.database.models import CacheEntryModel

logger = structlog.get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SqlAlchemyCacheStore(CacheStore):
    """
    Cache store backed by the ``cache_entries`` table, shared by all workers.

    Opens a short session per call rather than borrowing the request session:
    writes happen after the response is sent, when that session is closed.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def exists(self, key: str) -> bool:
        return await self.get(key) is not None

    async def get(self, key: str) -> str | None:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(CacheEntryModel.value).where(
                        CacheEntryModel.key == key,
                        CacheEntryModel.expires_at > _utcnow(),
                    )
                )
                return result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise PersistenceError("cache read failed") from exc

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        expires_at = _utcnow() + timedelta(seconds=ttl_seconds)
        try:
            async with self._session_factory() as session:
                await session.merge(CacheEntryModel(key=key, value=value, expires_at=expires_at))
                await session.commit()
        except SQLAlchemyError as exc:
            raise PersistenceError("cache write failed") from exc

    async def purge_expired(self) -> int:
        """Delete expired rows; returns how many were removed."""
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    delete(CacheEntryModel).where(CacheEntryModel.expires_at <= _utcnow())
                )
                await session.commit()
        except SQLAlchemyError as exc:
            raise PersistenceError("cache purge failed") from exc
        removed = result.rowcount or 0
        logger.debug("cache_entries_purged", removed=removed)
        return removed
