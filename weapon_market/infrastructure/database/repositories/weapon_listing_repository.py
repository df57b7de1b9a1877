import functools
from collections.abc import Awaitable, Callable
from decimal import Decimal
from typing import Any, ParamSpec, TypeVar

import structlog
from sqlalchemy import ColumnElement, delete, false, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from weapon_market.application.errors import PersistenceError
from weapon_market.application.interfaces.listing_repository import ListingRepository
from weapon_market.domain.entities.weapon_listing import SaleSnapshot, WeaponListing
from weapon_market.domain.query.weapon_filter import (
    Number,
    Pagination,
    Range,
    SortDirection,
    WeaponFilter,
)
from weapon_market.infrastructure.database.models import WeaponListingModel, WeaponSaleModel

logger = structlog.get_logger(__name__)

P = ParamSpec("P")
T = TypeVar("T")

_NATURAL_KEY = ("network", "weapon_id")

# Representable range of each filterable column: INTEGER and NUMERIC(38, 18)
_STARS_LIMITS: tuple[Number, Number] = (-(2**31), 2**31 - 1)
_PRICE_LIMITS: tuple[Number, Number] = (-(10**20) + 1, 10**20 - 1)


def _wrap_errors(method: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
    @functools.wraps(method)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
        try:
            return await method(*args, **kwargs)
        except SQLAlchemyError as exc:
            logger.error("listing_repository_failed", operation=method.__name__, error=str(exc))
            raise PersistenceError(f"{method.__name__} failed") from exc

    return wrapper


def _to_domain(model: WeaponListingModel) -> WeaponListing:
    return WeaponListing(
        network=model.network,
        weapon_id=model.weapon_id,
        price=Decimal(str(model.price)),
        weapon_stars=model.weapon_stars,
        weapon_element=model.weapon_element,
        stat1_element=model.stat1_element,
        stat1_value=model.stat1_value,
        stat2_element=model.stat2_element,
        stat2_value=model.stat2_value,
        stat3_element=model.stat3_element,
        stat3_value=model.stat3_value,
        timestamp=model.timestamp,
        seller_address=model.seller_address,
        buyer_address=model.buyer_address,
    )


def _to_values(listing: WeaponListing) -> dict[str, Any]:
    return {
        "network": listing.network,
        "weapon_id": listing.weapon_id,
        "price": listing.price,
        "weapon_stars": listing.weapon_stars,
        "weapon_element": listing.weapon_element,
        "stat1_element": listing.stat1_element,
        "stat1_value": listing.stat1_value,
        "stat2_element": listing.stat2_element,
        "stat2_value": listing.stat2_value,
        "stat3_element": listing.stat3_element,
        "stat3_value": listing.stat3_value,
        "timestamp": listing.timestamp,
        "seller_address": listing.seller_address,
        "buyer_address": listing.buyer_address,
    }


def _range_conditions(
    column: Any, bounds: Range, limits: tuple[Number, Number]
) -> list[ColumnElement[bool]]:
    """
    Bounds outside the column's range are never bound as parameters: one that
    excludes every value matches nothing, one that excludes none is dropped.
    """
    low, high = limits
    conditions: list[ColumnElement[bool]] = []
    if bounds.gte is not None:
        if bounds.gte > high:
            return [false()]
        if bounds.gte > low:
            conditions.append(column >= bounds.gte)
    if bounds.lte is not None:
        if bounds.lte < low:
            return [false()]
        if bounds.lte < high:
            conditions.append(column <= bounds.lte)
    return conditions


def _conditions(weapon_filter: WeaponFilter) -> list[ColumnElement[bool]]:
    model = WeaponListingModel
    conditions: list[ColumnElement[bool]] = [model.network == weapon_filter.network]

    if weapon_filter.weapon_element is not None:
        conditions.append(model.weapon_element == weapon_filter.weapon_element)
    if weapon_filter.seller_address is not None:
        conditions.append(model.seller_address == weapon_filter.seller_address)

    if weapon_filter.open_listings_only:
        conditions.append(model.buyer_address.is_(None))
    else:
        conditions.append(model.buyer_address == weapon_filter.buyer_address)

    conditions += _range_conditions(model.weapon_stars, weapon_filter.weapon_stars, _STARS_LIMITS)
    conditions += _range_conditions(model.price, weapon_filter.price, _PRICE_LIMITS)

    return conditions


class SqlAlchemyWeaponListingRepository(ListingRepository):
    """SQLAlchemy implementation for weapon listings and the sale log."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @_wrap_errors
    async def find(
        self, weapon_filter: WeaponFilter, pagination: Pagination
    ) -> list[WeaponListing]:
        sort_column = getattr(WeaponListingModel, pagination.sort_attribute)
        order = (
            sort_column.asc()
            if pagination.sort_dir is SortDirection.ASCENDING
            else sort_column.desc()
        )
        query = (
            select(WeaponListingModel)
            .where(*_conditions(weapon_filter))
            .order_by(order, WeaponListingModel.id.asc())
            .offset(pagination.skip)
            .limit(pagination.limit)
        )
        result = await self._session.execute(query)
        return [_to_domain(m) for m in result.scalars().all()]

    @_wrap_errors
    async def count(self, weapon_filter: WeaponFilter) -> int:
        query = (
            select(func.count())
            .select_from(WeaponListingModel)
            .where(*_conditions(weapon_filter))
        )
        result = await self._session.execute(query)
        return result.scalar_one()

    @_wrap_errors
    async def find_one(self, network: str, weapon_id: str) -> WeaponListing | None:
        result = await self._session.execute(
            select(WeaponListingModel).where(
                WeaponListingModel.network == network,
                WeaponListingModel.weapon_id == weapon_id,
            )
        )
        model = result.scalar_one_or_none()
        return _to_domain(model) if model is not None else None

    @_wrap_errors
    async def replace_or_insert(self, listing: WeaponListing) -> None:
        values = _to_values(listing)
        dialect = self._session.get_bind().dialect.name
        insert = pg_insert if dialect == "postgresql" else sqlite_insert

        stmt = insert(WeaponListingModel).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=list(_NATURAL_KEY),
            set_={
                name: getattr(stmt.excluded, name)
                for name in values
                if name not in _NATURAL_KEY
            },
        )
        await self._session.execute(stmt)
        await self._session.commit()

    @_wrap_errors
    async def insert_snapshot(self, snapshot: SaleSnapshot) -> None:
        self._session.add(
            WeaponSaleModel(
                type=snapshot.type,
                network=snapshot.network,
                weapon_id=snapshot.weapon_id,
                weapon=snapshot.weapon,
                created_at=snapshot.created_at,
            )
        )
        await self._session.commit()

    @_wrap_errors
    async def remove_one(self, network: str, weapon_id: str) -> None:
        await self._session.execute(
            delete(WeaponListingModel).where(
                WeaponListingModel.network == network,
                WeaponListingModel.weapon_id == weapon_id,
            )
        )
        await self._session.commit()

    @_wrap_errors
    async def remove_many(self, *, seller_address: str) -> int:
        result = await self._session.execute(
            delete(WeaponListingModel).where(
                WeaponListingModel.seller_address == seller_address
            )
        )
        await self._session.commit()
        return result.rowcount or 0
