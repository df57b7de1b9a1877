from dataclasses import dataclass

import structlog

from weapon_market.application.errors import ValidationError
from weapon_market.application.interfaces.listing_repository import ListingRepository
from weapon_market.domain.entities.weapon_listing import SaleSnapshot

logger = structlog.get_logger(__name__)


@dataclass
class MarkWeaponSoldInput:
    network: str | None
    weapon_id: str | None


@dataclass
class MarkWeaponSoldOutput:
    snapshot: SaleSnapshot | None


class MarkWeaponSold:
    """
    Use case: Record a sale snapshot of the active listing.

    The listing itself is left untouched. An unknown listing is not an error;
    nothing is recorded for it.
    """

    def __init__(self, listing_repo: ListingRepository) -> None:
        self._listing_repo = listing_repo

    async def execute(self, input_data: MarkWeaponSoldInput) -> MarkWeaponSoldOutput:
        if not input_data.weapon_id or not input_data.network:
            raise ValidationError("Invalid weaponId or network.")

        # Read and insert are separate statements; a concurrent delete in
        # between still yields a snapshot.
        listing = await self._listing_repo.find_one(input_data.network, input_data.weapon_id)
        if listing is None:
            logger.info(
                "sale_skipped_listing_missing",
                network=input_data.network,
                weapon_id=input_data.weapon_id,
            )
            return MarkWeaponSoldOutput(snapshot=None)

        snapshot = SaleSnapshot.from_listing(listing)
        await self._listing_repo.insert_snapshot(snapshot)

        logger.info(
            "sale_recorded",
            network=listing.network,
            weapon_id=listing.weapon_id,
            buyer_address=listing.buyer_address,
        )
        return MarkWeaponSoldOutput(snapshot=snapshot)
