from dataclasses import dataclass, fields
from decimal import Decimal

import structlog

from weapon_market.application.errors import ValidationError
from weapon_market.application.interfaces.listing_repository import ListingRepository
from weapon_market.domain.entities.weapon_listing import WeaponListing

logger = structlog.get_logger(__name__)

REQUIRED_FIELDS = (
    "price",
    "weapon_id",
    "weapon_stars",
    "weapon_element",
    "stat1_element",
    "stat1_value",
    "timestamp",
    "seller_address",
    "network",
)

INVALID_BODY_MESSAGE = (
    "Invalid body. Must pass price, weaponId, weaponStars, weaponElement, stat1Element, "
    "stat1Value, timestamp, sellerAddress, network."
)


@dataclass
class UpsertWeaponListingInput:
    network: str | None
    weapon_id: str | None
    price: Decimal | None = None
    weapon_stars: int | None = None
    weapon_element: str | None = None
    stat1_element: str | None = None
    stat1_value: int | None = None
    stat2_element: str | None = None
    stat2_value: int | None = None
    stat3_element: str | None = None
    stat3_value: int | None = None
    timestamp: int | None = None
    seller_address: str | None = None
    buyer_address: str | None = None


class UpsertWeaponListing:
    """
    Use case: Store the full listing for ``(network, weapon_id)``, replacing
    any previous version. Repeated identical calls leave a single row.
    """

    def __init__(self, listing_repo: ListingRepository) -> None:
        self._listing_repo = listing_repo

    async def execute(self, input_data: UpsertWeaponListingInput) -> None:
        missing = [name for name in REQUIRED_FIELDS if not getattr(input_data, name)]
        if missing:
            logger.info("listing_upsert_rejected", missing=missing)
            raise ValidationError(INVALID_BODY_MESSAGE)

        listing = WeaponListing(**{f.name: getattr(input_data, f.name) for f in fields(input_data)})
        await self._listing_repo.replace_or_insert(listing)

        logger.info(
            "listing_upserted",
            network=listing.network,
            weapon_id=listing.weapon_id,
            seller_address=listing.seller_address,
        )
