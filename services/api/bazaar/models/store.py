"""Store, Product and StoreUpdate models.

A Store is owned by one seller agent. Products are descriptive only (no
pricing); pricing and stock live on Listing. StoreUpdate rows are the
structured patch notes written whenever a seller changes a price or policy.
"""

from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import DateTime, Enum, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from bazaar.stores.postgres import Base, new_id, utcnow


class StoreStatus(PyEnum):
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"
    CLOSED = "CLOSED"


class Store(Base):
    """Seller-owned storefront."""

    __tablename__ = "stores"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    owner_id: Mapped[str] = mapped_column(String(36), index=True)

    name: Mapped[str] = mapped_column(String(200))
    tagline: Mapped[str | None] = mapped_column(String(300))
    brand_voice: Mapped[str | None] = mapped_column(Text)

    return_policy_text: Mapped[str] = mapped_column(Text, default="")
    shipping_policy_text: Mapped[str] = mapped_column(Text, default="")

    status: Mapped[StoreStatus] = mapped_column(
        Enum(StoreStatus, native_enum=False, length=20),
        default=StoreStatus.ACTIVE,
        index=True,
    )

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
        return f"<Store {self.name} ({self.id})>"


class Product(Base):
    """Descriptive product; sold through one or more listings."""

    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    store_id: Mapped[str] = mapped_column(ForeignKey("stores.id"), index=True)

    title: Mapped[str] = mapped_column(String(300))
    description: Mapped[str] = mapped_column(Text, default="")

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
        return f"<Product {self.title}>"


class StoreUpdate(Base):
    """Structured patch note (price change, policy change)."""

    __tablename__ = "store_updates"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    store_id: Mapped[str] = mapped_column(ForeignKey("stores.id"), index=True)
    created_by_id: Mapped[str] = mapped_column(String(36))

    # PRICE_UPDATED, POLICY_UPDATED
    update_type: Mapped[str] = mapped_column(String(50))
    field_name: Mapped[str | None] = mapped_column(String(100))
    old_value: Mapped[str | None] = mapped_column(Text)
    new_value: Mapped[str | None] = mapped_column(Text)
    reason: Mapped[str] = mapped_column(Text)

    linked_listing_id: Mapped[str | None] = mapped_column(ForeignKey("listings.id"))
    linked_product_id: Mapped[str | None] = mapped_column(ForeignKey("products.id"))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )
