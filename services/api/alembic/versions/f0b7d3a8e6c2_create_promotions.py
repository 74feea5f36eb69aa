"""create_promotions

Bounded promotion queue. The partial unique index allows at most one
ACTIVE/QUEUED promotion per listing; EXPIRED and CANCELLED rows are history.

Revision ID: f0b7d3a8e6c2
Revises: c52e9f7a1d04
Create Date: 2026-09-10
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "f0b7d3a8e6c2"
down_revision: Union[str, Sequence[str], None] = "c52e9f7a1d04"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

OPEN_PREDICATE = sa.text("status IN ('ACTIVE', 'QUEUED')")


def upgrade() -> None:
    op.create_table(
        "promotions",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("listing_id", sa.String(length=36), nullable=False),
        sa.Column("store_id", sa.String(length=36), nullable=False),
        sa.Column("seller_id", sa.String(length=36), nullable=False),
        sa.Column("original_price_minor", sa.Integer(), nullable=False),
        sa.Column("promo_price_minor", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("activated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["listing_id"], ["listings.id"]),
        sa.ForeignKeyConstraint(["store_id"], ["stores.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_promotions_listing_id"), "promotions", ["listing_id"], unique=False)
    op.create_index(op.f("ix_promotions_store_id"), "promotions", ["store_id"], unique=False)
    op.create_index(op.f("ix_promotions_status"), "promotions", ["status"], unique=False)
    op.create_index(
        "uq_promotions_one_open_per_listing",
        "promotions",
        ["listing_id"],
        unique=True,
        postgresql_where=OPEN_PREDICATE,
        sqlite_where=OPEN_PREDICATE,
    )


def downgrade() -> None:
    op.drop_index("uq_promotions_one_open_per_listing", table_name="promotions")
    op.drop_index(op.f("ix_promotions_status"), table_name="promotions")
    op.drop_index(op.f("ix_promotions_store_id"), table_name="promotions")
    op.drop_index(op.f("ix_promotions_listing_id"), table_name="promotions")
    op.drop_table("promotions")
