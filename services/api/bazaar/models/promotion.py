"""Promotion model.

A time-boxed discount slot for a listing. At most 3 promotions are ACTIVE at
once and at most 10 are open (ACTIVE + QUEUED); extra ones wait FIFO by
`position`. The partial unique index keeps one open promotion per listing.
"""

from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Integer, String, func, text
from sqlalchemy.orm import Mapped, mapped_column

from bazaar.stores.postgres import Base, new_id, utcnow


class PromotionStatus(PyEnum):
    ACTIVE = "ACTIVE"
    QUEUED = "QUEUED"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"


OPEN_STATUSES = (PromotionStatus.ACTIVE, PromotionStatus.QUEUED)

_OPEN_PREDICATE = text("status IN ('ACTIVE', 'QUEUED')")


class Promotion(Base):
    __tablename__ = "promotions"
    __table_args__ = (
        Index(
            "uq_promotions_one_open_per_listing",
            "listing_id",
            unique=True,
            postgresql_where=_OPEN_PREDICATE,
            sqlite_where=_OPEN_PREDICATE,
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    listing_id: Mapped[str] = mapped_column(ForeignKey("listings.id"), index=True)
    store_id: Mapped[str] = mapped_column(ForeignKey("stores.id"), index=True)
    seller_id: Mapped[str] = mapped_column(String(36))

    original_price_minor: Mapped[int] = mapped_column(Integer)
    promo_price_minor: Mapped[int] = mapped_column(Integer)

    status: Mapped[PromotionStatus] = mapped_column(
        Enum(PromotionStatus, native_enum=False, length=20),
        index=True,
    )
    # FIFO order for queued promotions (monotonically increasing)
    position: Mapped[int] = mapped_column(Integer)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )
    activated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    # Set when the promotion takes an ACTIVE slot
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    def __repr__(self) -> str:
        return f"<Promotion {self.id} listing={self.listing_id} ({self.status.value}) pos={self.position}>"
