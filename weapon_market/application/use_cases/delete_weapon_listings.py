from dataclasses import dataclass

import structlog

from weapon_market.application.errors import ValidationError
from weapon_market.application.interfaces.listing_repository import ListingRepository

logger = structlog.get_logger(__name__)


@dataclass
class DeleteWeaponListingInput:
    network: str | None
    weapon_id: str | None


@dataclass
class DeleteSellerListingsInput:
    seller_address: str | None


class DeleteWeaponListing:
    """Use case: Remove one listing by natural key. Missing rows are fine."""

    def __init__(self, listing_repo: ListingRepository) -> None:
        self._listing_repo = listing_repo

    async def execute(self, input_data: DeleteWeaponListingInput) -> None:
        if not input_data.weapon_id or not input_data.network:
            raise ValidationError("Invalid weaponId or network.")

        await self._listing_repo.remove_one(input_data.network, input_data.weapon_id)
        logger.info(
            "listing_deleted",
            network=input_data.network,
            weapon_id=input_data.weapon_id,
        )


class DeleteSellerListings:
    """Use case: Remove every listing of a seller, on every network."""

    def __init__(self, listing_repo: ListingRepository) -> None:
        self._listing_repo = listing_repo

    async def execute(self, input_data: DeleteSellerListingsInput) -> int:
        if not input_data.seller_address:
            raise ValidationError("Invalid address.")

        removed = await self._listing_repo.remove_many(seller_address=input_data.seller_address)
        logger.info(
            "seller_listings_deleted",
            seller_address=input_data.seller_address,
            removed=removed,
        )
        return removed
