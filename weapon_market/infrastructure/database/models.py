"""
Tables for the active weapon market, the sale log and the shared page cache.

``market_weapons`` holds one row per ``(network, weapon_id)``; the unique
constraint backs the repository's upsert.
"""
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    BigInteger,
    DateTime,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from weapon_market.infrastructure.database.connection import Base

# SQLite only autoincrements INTEGER primary keys
_id_type = BigInteger().with_variant(Integer, "sqlite")
_document_type = JSON().with_variant(JSONB, "postgresql")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WeaponListingModel(Base):
    __tablename__ = "market_weapons"

    id: Mapped[int] = mapped_column(_id_type, primary_key=True, autoincrement=True)

    # Natural key
    network: Mapped[str] = mapped_column(String(64), nullable=False)
    weapon_id: Mapped[str] = mapped_column(String(128), nullable=False)

    price: Mapped[float] = mapped_column(Numeric(38, 18), nullable=False, index=True)
    weapon_stars: Mapped[int] = mapped_column(Integer, nullable=False)
    weapon_element: Mapped[str] = mapped_column(String(32), nullable=False)

    # Stats
    stat1_element: Mapped[str] = mapped_column(String(32), nullable=False)
    stat1_value: Mapped[int] = mapped_column(Integer, nullable=False)
    stat2_element: Mapped[str | None] = mapped_column(String(32), nullable=True)
    stat2_value: Mapped[int | None] = mapped_column(Integer, nullable=True)
    stat3_element: Mapped[str | None] = mapped_column(String(32), nullable=True)
    stat3_value: Mapped[int | None] = mapped_column(Integer, nullable=True)

    timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)

    # Parties
    seller_address: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    buyer_address: Mapped[str | None] = mapped_column(String(128), nullable=True)

    __table_args__ = (
        UniqueConstraint("network", "weapon_id", name="uq_market_weapons_network_weapon_id"),
        Index("ix_market_weapons_network_buyer", "network", "buyer_address"),
    )


class WeaponSaleModel(Base):
    __tablename__ = "market_sales"

    id: Mapped[int] = mapped_column(_id_type, primary_key=True, autoincrement=True)
    type: Mapped[str] = mapped_column(String(32), nullable=False, default="weapon")
    network: Mapped[str] = mapped_column(String(64), nullable=False)
    weapon_id: Mapped[str] = mapped_column(String(128), nullable=False)
    weapon: Mapped[dict] = mapped_column(_document_type, nullable=False)  # type: ignore[type-arg]
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )

    __table_args__ = (
        Index("ix_market_sales_network_weapon_id", "network", "weapon_id"),
    )


class CacheEntryModel(Base):
    __tablename__ = "cache_entries"

    key: Mapped[str] = mapped_column(Text, primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
