import json
from dataclasses import dataclass
from typing import Any

import structlog

from weapon_market.application.cache_key import CacheKeyEncoder
from weapon_market.application.interfaces.cache_store import CacheStore
from weapon_market.application.interfaces.listing_repository import ListingRepository
from weapon_market.application.query_builder import QueryBuilder, SearchParams
from weapon_market.config import settings
from weapon_market.domain.entities.weapon_listing import WeaponListing
from weapon_market.domain.query.weapon_filter import Pagination

logger = structlog.get_logger(__name__)


@dataclass
class SearchWeaponListingsInput:
    params: SearchParams
    is_authenticated: bool = False


@dataclass
class SearchWeaponListingsOutput:
    body: str
    cache_key: str
    from_cache: bool


def _assemble_page(
    results: list[WeaponListing], total: int, pagination: Pagination
) -> dict[str, Any]:
    page_size = pagination.limit
    page_num = pagination.page_num
    return {
        "results": [listing.to_document() for listing in results],
        "idResults": [listing.weapon_id for listing in results],
        "page": {
            "curPage": page_num,
            "curOffset": page_num * page_size,
            "total": total,
            "pageSize": page_size,
            # Floor: a trailing partial page is not counted
            "numPages": total // page_size,
        },
    }


class SearchWeaponListings:
    """
    Use case: Search active weapon listings, cache-aside.

    Unauthenticated callers may be served a cached page verbatim. Everyone
    else, and every cache miss, reads the repository. The assembled page is
    serialized once so the cached copy is byte-identical to the response.
    Writing it back to the cache is left to ``populate_cache``, which the
    caller schedules after the response is delivered.
    """

    def __init__(
        self,
        listing_repo: ListingRepository,
        cache_store: CacheStore | None = None,
        query_builder: QueryBuilder | None = None,
        key_encoder: CacheKeyEncoder | None = None,
        cache_ttl_seconds: int = settings.cache_ttl_seconds,
    ) -> None:
        self._listing_repo = listing_repo
        self._cache_store = cache_store
        self._query_builder = query_builder or QueryBuilder()
        self._key_encoder = key_encoder or CacheKeyEncoder()
        self._cache_ttl_seconds = cache_ttl_seconds

    async def execute(self, input_data: SearchWeaponListingsInput) -> SearchWeaponListingsOutput:
        weapon_filter, pagination = self._query_builder.build(input_data.params)
        cache_key = self._key_encoder.encode(weapon_filter, pagination)

        cache_store = self._cache_store
        if cache_store is not None and not input_data.is_authenticated:
            cached = await self._read_cached_page(cache_store, cache_key)
            if cached is not None:
                logger.debug("search_cache_hit", cache_key=cache_key)
                return SearchWeaponListingsOutput(body=cached, cache_key=cache_key, from_cache=True)

        results = await self._listing_repo.find(weapon_filter, pagination)
        total = await self._listing_repo.count(weapon_filter)

        body = json.dumps(_assemble_page(results, total, pagination), default=str)
        logger.debug(
            "search_executed",
            network=weapon_filter.network,
            total=total,
            returned=len(results),
        )
        return SearchWeaponListingsOutput(body=body, cache_key=cache_key, from_cache=False)

    async def populate_cache(self, output: SearchWeaponListingsOutput) -> None:
        """Best-effort write-back of a freshly assembled page."""
        if self._cache_store is None or output.from_cache:
            return
        try:
            await self._cache_store.set(output.cache_key, output.body, self._cache_ttl_seconds)
        except Exception:
            # The response has already been delivered; only performance suffers.
            logger.exception("search_cache_write_failed", cache_key=output.cache_key)

    async def _read_cached_page(self, cache_store: CacheStore, cache_key: str) -> str | None:
        try:
            if not await cache_store.exists(cache_key):
                return None
            raw = await cache_store.get(cache_key)
        except Exception:
            logger.exception("search_cache_read_failed", cache_key=cache_key)
            return None

        if not raw:
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("search_cache_entry_corrupt", cache_key=cache_key)
            return None
        # Empty pages are never served from cache
        if not isinstance(data, dict) or not data.get("results"):
            return None
        return raw
