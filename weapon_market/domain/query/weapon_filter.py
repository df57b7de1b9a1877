"""
Canonical search query types.

Every field is always present in the canonical form, including unset ones,
so that two filters serialize identically if and only if they are equal.
"""
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

Number = int | float

# Public (camelCase) field name -> listing attribute
SORTABLE_FIELDS: dict[str, str] = {
    "timestamp": "timestamp",
    "price": "price",
    "weaponStars": "weapon_stars",
    "weaponId": "weapon_id",
    "weaponElement": "weapon_element",
    "stat1Value": "stat1_value",
    "stat2Value": "stat2_value",
    "stat3Value": "stat3_value",
}


class SortDirection(IntEnum):
    ASCENDING = 1
    DESCENDING = -1


@dataclass(frozen=True)
class Range:
    """Inclusive bounds; ``None`` leaves that side open."""

    gte: Number | None = None
    lte: Number | None = None

    @property
    def is_unbounded(self) -> bool:
        return self.gte is None and self.lte is None

    def canonical(self) -> dict[str, Any]:
        return {"gte": self.gte, "lte": self.lte}


@dataclass(frozen=True)
class WeaponFilter:
    network: str
    weapon_element: str | None = None
    seller_address: str | None = None
    # None matches only open listings (no buyer recorded)
    buyer_address: str | None = None
    weapon_stars: Range = field(default_factory=Range)
    price: Range = field(default_factory=Range)

    @property
    def open_listings_only(self) -> bool:
        return self.buyer_address is None

    def canonical(self) -> dict[str, Any]:
        return {
            "network": self.network,
            "weaponElement": self.weapon_element,
            "sellerAddress": self.seller_address,
            "buyerAddress": {"$eq": None} if self.open_listings_only else self.buyer_address,
            "weaponStars": self.weapon_stars.canonical(),
            "price": self.price.canonical(),
        }


@dataclass(frozen=True)
class Pagination:
    skip: int
    limit: int
    sort_by: str = "timestamp"
    sort_dir: SortDirection = SortDirection.DESCENDING

    @property
    def page_num(self) -> int:
        return self.skip // self.limit

    @property
    def sort_attribute(self) -> str:
        return SORTABLE_FIELDS[self.sort_by]

    def canonical(self) -> dict[str, Any]:
        return {
            "skip": self.skip,
            "limit": self.limit,
            "sort": {self.sort_by: int(self.sort_dir)},
        }
