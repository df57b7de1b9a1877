"""
Normalizes raw search parameters into a canonical filter and pagination.

Raw values arrive as optional strings. Unparsable or zero numerics fall back
to their defaults, and optional price bounds stay unset unless they carry a
positive value.
"""
import math
from dataclasses import dataclass

from weapon_market.config import settings
from weapon_market.domain.query.weapon_filter import (
    SORTABLE_FIELDS,
    Number,
    Pagination,
    Range,
    SortDirection,
    WeaponFilter,
)

DEFAULT_SORT_BY = "timestamp"
DEFAULT_MIN_STARS = 1
DEFAULT_MAX_STARS = 5


@dataclass
class SearchParams:
    element: str | None = None
    min_stars: str | None = None
    max_stars: str | None = None
    sort_by: str | None = None
    sort_dir: str | None = None
    page_size: str | None = None
    page_num: str | None = None
    seller_address: str | None = None
    buyer_address: str | None = None
    min_price: str | None = None
    max_price: str | None = None
    network: str | None = None


def _to_number(raw: str | None) -> Number | None:
    if raw is None or raw.strip() == "":
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return int(value) if value.is_integer() else value


def _to_int(raw: str | None) -> int | None:
    value = _to_number(raw)
    return int(value) if value is not None else None


def _text(raw: str | None) -> str | None:
    return raw or None


def _price_bound(raw: str | None) -> Number | None:
    value = _to_number(raw)
    if value is None:
        return None
    value = max(value, 0)
    # A zero bound constrains nothing
    return value or None


def _sort_direction(raw: str | None) -> SortDirection:
    return SortDirection.ASCENDING if _to_int(raw) == 1 else SortDirection.DESCENDING


class QueryBuilder:
    def __init__(
        self,
        default_network: str = settings.default_network,
        max_page_size: int = settings.max_page_size,
    ) -> None:
        self._default_network = default_network
        self._max_page_size = max_page_size

    def build(self, params: SearchParams) -> tuple[WeaponFilter, Pagination]:
        weapon_filter = WeaponFilter(
            network=_text(params.network) or self._default_network,
            weapon_element=_text(params.element),
            seller_address=_text(params.seller_address),
            buyer_address=_text(params.buyer_address),
            weapon_stars=Range(
                gte=_to_int(params.min_stars) or DEFAULT_MIN_STARS,
                lte=_to_int(params.max_stars) or DEFAULT_MAX_STARS,
            ),
            price=Range(
                gte=_price_bound(params.min_price),
                lte=_price_bound(params.max_price),
            ),
        )

        page_size = _to_int(params.page_size) or self._max_page_size
        page_size = max(1, min(page_size, self._max_page_size))
        page_num = max(_to_int(params.page_num) or 0, 0)

        sort_by = params.sort_by if params.sort_by in SORTABLE_FIELDS else DEFAULT_SORT_BY

        pagination = Pagination(
            skip=page_size * page_num,
            limit=page_size,
            sort_by=sort_by,
            sort_dir=_sort_direction(params.sort_dir),
        )
        return weapon_filter, pagination
