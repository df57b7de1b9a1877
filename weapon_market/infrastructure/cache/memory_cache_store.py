"""
Per-process cache store.

An expired entry is dropped when it is next read, and writes sweep out every
expired entry at most once per ``sweep_interval`` seconds, so keys that are
never read again do not accumulate. Suitable for a single worker; use the
database store when several workers should share cached pages.
"""
import asyncio
import time

from weapon_market.application.interfaces.cache_store import CacheStore

DEFAULT_SWEEP_INTERVAL = 60.0


class InMemoryCacheStore(CacheStore):
    def __init__(  # type: ignore[no-untyped-def]
        self, clock=time.monotonic, sweep_interval: float = DEFAULT_SWEEP_INTERVAL
    ) -> None:
        self._clock = clock
        self._sweep_interval = sweep_interval
        self._next_sweep_at = clock() + sweep_interval
        self._entries: dict[str, tuple[float, str]] = {}
        self._lock = asyncio.Lock()

    async def exists(self, key: str) -> bool:
        return await self.get(key) is not None

    async def get(self, key: str) -> str | None:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if expires_at <= self._clock():
                del self._entries[key]
                return None
            return value

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        async with self._lock:
            now = self._clock()
            if now >= self._next_sweep_at:
                self._sweep(now)
            self._entries[key] = (now + ttl_seconds, value)

    def _sweep(self, now: float) -> None:
        expired = [key for key, (expires_at, _) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]
        self._next_sweep_at = now + self._sweep_interval

    def __len__(self) -> int:
        return len(self._entries)
