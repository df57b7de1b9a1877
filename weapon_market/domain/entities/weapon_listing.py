from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class WeaponListing:
    """
    A weapon offered on the market of one network.

    Identified by its natural key ``(network, weapon_id)``. A listing with a
    ``buyer_address`` records a completed trade but stays in the active table
    until it is removed explicitly.
    """

    network: str
    weapon_id: str
    price: Decimal
    weapon_stars: int
    weapon_element: str
    stat1_element: str
    stat1_value: int
    timestamp: int
    seller_address: str
    stat2_element: str | None = None
    stat2_value: int | None = None
    stat3_element: str | None = None
    stat3_value: int | None = None
    buyer_address: str | None = None

    @property
    def natural_key(self) -> tuple[str, str]:
        return self.network, self.weapon_id

    @property
    def is_open(self) -> bool:
        return self.buyer_address is None

    def to_document(self) -> dict[str, Any]:
        """Public representation, keyed the way market clients expect."""
        return {
            "network": self.network,
            "weaponId": self.weapon_id,
            "price": float(self.price),
            "weaponStars": self.weapon_stars,
            "weaponElement": self.weapon_element,
            "stat1Element": self.stat1_element,
            "stat1Value": self.stat1_value,
            "stat2Element": self.stat2_element,
            "stat2Value": self.stat2_value,
            "stat3Element": self.stat3_element,
            "stat3Value": self.stat3_value,
            "timestamp": self.timestamp,
            "sellerAddress": self.seller_address,
            "buyerAddress": self.buyer_address,
        }


@dataclass(frozen=True)
class SaleSnapshot:
    """Append-only copy of a listing taken when it is marked sold."""

    network: str
    weapon_id: str
    weapon: dict[str, Any]
    type: str = "weapon"
    created_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def from_listing(cls, listing: WeaponListing) -> "SaleSnapshot":
        return cls(
            network=listing.network,
            weapon_id=listing.weapon_id,
            weapon=listing.to_document(),
        )
