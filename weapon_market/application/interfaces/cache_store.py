from abc import ABC, abstractmethod


class CacheStore(ABC):
    """Port for a keyed, expiring store of serialized search pages."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        ...

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the stored value, or None when missing or expired."""
        ...

    @abstractmethod
    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        ...
