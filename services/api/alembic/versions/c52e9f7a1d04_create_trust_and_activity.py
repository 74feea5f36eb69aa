"""create_trust_and_activity

Trust profiles, trust events and the activity feed.

Revision ID: c52e9f7a1d04
Revises: 8a4d2b6e0f13
Create Date: 2026-09-03
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "c52e9f7a1d04"
down_revision: Union[str, Sequence[str], None] = "8a4d2b6e0f13"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "trust_profiles",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("store_id", sa.String(length=36), nullable=False),
        sa.Column("overall_score", sa.Float(), nullable=False, server_default="50"),
        sa.Column("product_satisfaction_score", sa.Float(), nullable=False, server_default="50"),
        sa.Column("claim_accuracy_score", sa.Float(), nullable=False, server_default="50"),
        sa.Column("support_responsiveness_score", sa.Float(), nullable=False, server_default="50"),
        sa.Column("policy_clarity_score", sa.Float(), nullable=False, server_default="50"),
        sa.Column("last_updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["store_id"], ["stores.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("store_id"),
    )

    op.create_table(
        "trust_events",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("store_id", sa.String(length=36), nullable=False),
        sa.Column("reason", sa.String(length=50), nullable=False),
        sa.Column("delta_overall", sa.Float(), nullable=False),
        sa.Column("delta_product_satisfaction", sa.Float(), nullable=False),
        sa.Column("delta_claim_accuracy", sa.Float(), nullable=False),
        sa.Column("delta_support_responsiveness", sa.Float(), nullable=False),
        sa.Column("delta_policy_clarity", sa.Float(), nullable=False),
        sa.Column("linked_thread_id", sa.String(length=36), nullable=True),
        sa.Column("linked_order_id", sa.String(length=36), nullable=True),
        sa.Column("linked_review_id", sa.String(length=36), nullable=True),
        sa.Column("meta", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["linked_order_id"], ["orders.id"]),
        sa.ForeignKeyConstraint(["linked_review_id"], ["reviews.id"]),
        sa.ForeignKeyConstraint(["store_id"], ["stores.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_trust_events_store_created", "trust_events", ["store_id", "created_at"], unique=False)

    op.create_table(
        "activity_events",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("event_type", sa.String(length=40), nullable=False),
        sa.Column("actor_id", sa.String(length=36), nullable=True),
        sa.Column("store_id", sa.String(length=36), nullable=True),
        sa.Column("listing_id", sa.String(length=36), nullable=True),
        sa.Column("thread_id", sa.String(length=36), nullable=True),
        sa.Column("message_id", sa.String(length=36), nullable=True),
        sa.Column("order_id", sa.String(length=36), nullable=True),
        sa.Column("review_id", sa.String(length=36), nullable=True),
        sa.Column("store_update_id", sa.String(length=36), nullable=True),
        sa.Column("trust_event_id", sa.String(length=36), nullable=True),
        sa.Column("promotion_id", sa.String(length=36), nullable=True),
        sa.Column("meta", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_activity_events_created", "activity_events", ["created_at"], unique=False)
    op.create_index("ix_activity_events_type_created", "activity_events", ["event_type", "created_at"], unique=False)
    op.create_index("ix_activity_events_store_created", "activity_events", ["store_id", "created_at"], unique=False)
    op.create_index("ix_activity_events_listing_created", "activity_events", ["listing_id", "created_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_activity_events_listing_created", table_name="activity_events")
    op.drop_index("ix_activity_events_store_created", table_name="activity_events")
    op.drop_index("ix_activity_events_type_created", table_name="activity_events")
    op.drop_index("ix_activity_events_created", table_name="activity_events")
    op.drop_table("activity_events")
    op.drop_index("ix_trust_events_store_created", table_name="trust_events")
    op.drop_table("trust_events")
    op.drop_table("trust_profiles")
