"""
Request-scoped wiring for the market API.

Routes receive ready-built use cases from here. The cache store is a
per-process singleton chosen by ``settings.cache_backend``, and callers are
authenticated by the shared ``X-API-Key`` secret.
"""
import secrets
from collections.abc import AsyncGenerator
from functools import lru_cache

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from weapon_market.application.interfaces.cache_store import CacheStore
from weapon_market.application.interfaces.listing_repository import ListingRepository
from weapon_market.application.use_cases.delete_weapon_listings import (
    DeleteSellerListings,
    DeleteWeaponListing,
)
from weapon_market.application.use_cases.mark_weapon_sold import MarkWeaponSold
from weapon_market.application.use_cases.search_weapon_listings import SearchWeaponListings
from weapon_market.application.use_cases.upsert_weapon_listing import UpsertWeaponListing
from weapon_market.config import settings
from weapon_market.infrastructure.cache.database_cache_store import SqlAlchemyCacheStore
from weapon_market.infrastructure.cache.memory_cache_store import InMemoryCacheStore
from weapon_market.infrastructure.database.connection import AsyncSessionLocal, get_db_session
from weapon_market.infrastructure.database.repositories.weapon_listing_repository import (
    SqlAlchemyWeaponListingRepository,
)


# ---- Low-level dependencies ------------------------------------------------

async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async for session in get_db_session():
        yield session


def get_listing_repo(session: AsyncSession = Depends(get_session)) -> ListingRepository:
    return SqlAlchemyWeaponListingRepository(session)


@lru_cache
def _build_cache_store(backend: str) -> CacheStore | None:
    if backend == "memory":
        return InMemoryCacheStore()
    if backend == "database":
        return SqlAlchemyCacheStore(AsyncSessionLocal)
    return None


def get_cache_store() -> CacheStore | None:
    return _build_cache_store(settings.cache_backend)


# ---- Authentication --------------------------------------------------------

def get_is_authenticated(x_api_key: str | None = Header(default=None)) -> bool:
    if not settings.market_api_key or not x_api_key:
        return False
    # Header values arrive latin-1 decoded; compare raw bytes so non-ASCII
    # keys are simply a mismatch.
    return secrets.compare_digest(
        x_api_key.encode("latin-1"), settings.market_api_key.encode("utf-8")
    )


def require_authenticated(is_authenticated: bool = Depends(get_is_authenticated)) -> None:
    if not is_authenticated:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated.")


# ---- Use-case dependencies -------------------------------------------------

def get_search_use_case(
    listing_repo: ListingRepository = Depends(get_listing_repo),
    cache_store: CacheStore | None = Depends(get_cache_store),
) -> SearchWeaponListings:
    return SearchWeaponListings(listing_repo, cache_store)


def get_upsert_use_case(
    listing_repo: ListingRepository = Depends(get_listing_repo),
) -> UpsertWeaponListing:
    return UpsertWeaponListing(listing_repo)


def get_mark_sold_use_case(
    listing_repo: ListingRepository = Depends(get_listing_repo),
) -> MarkWeaponSold:
    return MarkWeaponSold(listing_repo)


def get_delete_use_case(
    listing_repo: ListingRepository = Depends(get_listing_repo),
) -> DeleteWeaponListing:
    return DeleteWeaponListing(listing_repo)


def get_delete_seller_use_case(
    listing_repo: ListingRepository = Depends(get_listing_repo),
) -> DeleteSellerListings:
    return DeleteSellerListings(listing_repo)
