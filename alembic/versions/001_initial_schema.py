"""initial schema

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""
from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

from alembic import op

revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Active listings, one row per (network, weapon_id)
    op.create_table(
        "market_weapons",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("network", sa.String(64), nullable=False),
        sa.Column("weapon_id", sa.String(128), nullable=False),
        sa.Column("price", sa.Numeric(38, 18), nullable=False),
        sa.Column("weapon_stars", sa.Integer(), nullable=False),
        sa.Column("weapon_element", sa.String(32), nullable=False),
        # Stats
        sa.Column("stat1_element", sa.String(32), nullable=False),
        sa.Column("stat1_value", sa.Integer(), nullable=False),
        sa.Column("stat2_element", sa.String(32), nullable=True),
        sa.Column("stat2_value", sa.Integer(), nullable=True),
        sa.Column("stat3_element", sa.String(32), nullable=True),
        sa.Column("stat3_value", sa.Integer(), nullable=True),
        sa.Column("timestamp", sa.BigInteger(), nullable=False),
        # Parties
        sa.Column("seller_address", sa.String(128), nullable=False),
        sa.Column("buyer_address", sa.String(128), nullable=True),
        sa.UniqueConstraint("network", "weapon_id", name="uq_market_weapons_network_weapon_id"),
    )

    op.create_index("ix_market_weapons_price", "market_weapons", ["price"])
    op.create_index("ix_market_weapons_timestamp", "market_weapons", ["timestamp"])
    op.create_index("ix_market_weapons_seller_address", "market_weapons", ["seller_address"])
    op.create_index("ix_market_weapons_network_buyer", "market_weapons", ["network", "buyer_address"])

    # Append-only sale log
    op.create_table(
        "market_sales",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("type", sa.String(32), nullable=False),
        sa.Column("network", sa.String(64), nullable=False),
        sa.Column("weapon_id", sa.String(128), nullable=False),
        sa.Column("weapon", JSONB, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    )
    op.create_index("ix_market_sales_network_weapon_id", "market_sales", ["network", "weapon_id"])

    # Shared search page cache
    op.create_table(
        "cache_entries",
        sa.Column("key", sa.Text(), primary_key=True),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_cache_entries_expires_at", "cache_entries", ["expires_at"])


def downgrade() -> None:
    op.drop_table("cache_entries")
    op.drop_table("market_sales")
    op.drop_table("market_weapons")
