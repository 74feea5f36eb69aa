"""Listing model.

A Listing is a sellable instance of a Product: price, currency, stock and
lifecycle status. Listings are never hard-deleted.
"""

from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import CheckConstraint, DateTime, Enum, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from bazaar.stores.postgres import Base, new_id, utcnow


class ListingStatus(PyEnum):
    ACTIVE = "ACTIVE"
    SOLD_OUT = "SOLD_OUT"


class Listing(Base):
    """Priced, stocked listing of a product."""

    __tablename__ = "listings"
    __table_args__ = (
        CheckConstraint("price_minor >= 0", name="ck_listings_price_non_negative"),
        CheckConstraint("stock_on_hand >= 0", name="ck_listings_stock_non_negative"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    # Relations
    store_id: Mapped[str] = mapped_column(ForeignKey("stores.id"), index=True)
    product_id: Mapped[str] = mapped_column(ForeignKey("products.id"), index=True)

    # Pricing (integer minor units, e.g. cents)
    price_minor: Mapped[int] = mapped_column(Integer)
    currency: Mapped[str] = mapped_column(String(3), default="USD")

    # Inventory
    stock_on_hand: Mapped[int] = mapped_column(Integer)
    status: Mapped[ListingStatus] = mapped_column(
        Enum(ListingStatus, native_enum=False, length=20),
        default=ListingStatus.ACTIVE,
        index=True,
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )

    def __repr__(self) -> str:
        return f"<Listing {self.id} {self.price_minor} {self.currency} x{self.stock_on_hand} ({self.status.value})>"
