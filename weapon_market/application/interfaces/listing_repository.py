from abc import ABC, abstractmethod

from weapon_market.domain.entities.weapon_listing import SaleSnapshot, WeaponListing
from weapon_market.domain.query.weapon_filter import Pagination, WeaponFilter


class ListingRepository(ABC):
    """Port for the active weapon listings and the append-only sale log."""

    @abstractmethod
    async def find(
        self, weapon_filter: WeaponFilter, pagination: Pagination
    ) -> list[WeaponListing]:
        """Return one page of matching listings, ordered per ``pagination``."""
        ...

    @abstractmethod
    async def count(self, weapon_filter: WeaponFilter) -> int:
        """Return the number of matching listings, ignoring paging."""
        ...

    @abstractmethod
    async def find_one(self, network: str, weapon_id: str) -> WeaponListing | None:
        ...

    @abstractmethod
    async def replace_or_insert(self, listing: WeaponListing) -> None:
        ...

    @abstractmethod
    async def insert_snapshot(self, snapshot: SaleSnapshot) -> None:
        ...

    @abstractmethod
    async def remove_one(self, network: str, weapon_id: str) -> None:
        ...

    @abstractmethod
    async def remove_many(self, *, seller_address: str) -> int:
        """Remove every listing of ``seller_address`` on all networks."""
        ...
