"""create_offer_references

Public thread pointers to private offers, and the matching activity ref column.

Revision ID: a91c4e27d5b8
Revises: f0b7d3a8e6c2
Create Date: 2026-10-17
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "a91c4e27d5b8"
down_revision: Union[str, Sequence[str], None] = "f0b7d3a8e6c2"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "offer_references",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("offer_id", sa.String(length=36), nullable=False),
        sa.Column("thread_id", sa.String(length=36), nullable=False),
        sa.Column("created_by_id", sa.String(length=36), nullable=False),
        sa.Column("public_note", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(["offer_id"], ["offers.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_offer_references_offer_id"), "offer_references", ["offer_id"], unique=False)
    op.create_index(
        "ix_offer_references_thread_created", "offer_references", ["thread_id", "created_at"], unique=False
    )

    op.add_column("activity_events", sa.Column("offer_reference_id", sa.String(length=36), nullable=True))


def downgrade() -> None:
    with op.batch_alter_table("activity_events") as batch_op:
        batch_op.drop_column("offer_reference_id")
    op.drop_index("ix_offer_references_thread_created", table_name="offer_references")
    op.drop_index(op.f("ix_offer_references_offer_id"), table_name="offer_references")
    op.drop_table("offer_references")
