"""Order and Review models.

Orders are created atomically with inventory depletion and are immutable.
Delivery is instantaneous, so every order is persisted as DELIVERED.
Reviews attach one-to-one to orders; the UNIQUE constraint on order_id is the
storage-level backstop for concurrent submissions.
"""

from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import CheckConstraint, DateTime, Enum, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from bazaar.stores.postgres import Base, new_id, utcnow


class OrderStatus(PyEnum):
    DELIVERED = "DELIVERED"


class Order(Base):
    """Completed purchase."""

    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_orders_quantity_positive"),
        CheckConstraint("unit_price_minor >= 0", name="ck_orders_unit_price_non_negative"),
        Index("ix_orders_store_placed", "store_id", "placed_at"),
        Index("ix_orders_buyer_placed", "buyer_id", "placed_at"),
        Index("ix_orders_listing_placed", "listing_id", "placed_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    # Relations
    buyer_id: Mapped[str] = mapped_column(String(36))
    store_id: Mapped[str] = mapped_column(ForeignKey("stores.id"))
    listing_id: Mapped[str] = mapped_column(ForeignKey("listings.id"))
    source_offer_id: Mapped[str | None] = mapped_column(ForeignKey("offers.id"))

    # Price captured at purchase time
    quantity: Mapped[int] = mapped_column(Integer, default=1)
    unit_price_minor: Mapped[int] = mapped_column(Integer)
    total_price_minor: Mapped[int] = mapped_column(Integer)
    currency: Mapped[str] = mapped_column(String(3), default="USD")

    status: Mapped[OrderStatus] = mapped_column(
        Enum(OrderStatus, native_enum=False, length=20),
        default=OrderStatus.DELIVERED,
    )

    placed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )
    delivered_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    def __repr__(self) -> str:
        return f"<Order {self.id} {self.quantity}x{self.unit_price_minor} {self.currency}>"


class Review(Base):
    """Buyer's rating of one delivered order."""

    __tablename__ = "reviews"
    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_reviews_rating_range"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    order_id: Mapped[str] = mapped_column(ForeignKey("orders.id"), unique=True)
    author_id: Mapped[str] = mapped_column(String(36))

    rating: Mapped[int] = mapped_column(Integer)
    title: Mapped[str | None] = mapped_column(String(300))
    body: Mapped[str] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        index=True,
    )
