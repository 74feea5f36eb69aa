"""Offer model.

A private price proposal from a buyer on a listing. Terms (price, message)
are visible only to the buyer and the owner of the seller store.
"""

from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import CheckConstraint, DateTime, Enum, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from bazaar.stores.postgres import Base, new_id, utcnow


class OfferStatus(PyEnum):
    PROPOSED = "PROPOSED"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class Offer(Base):
    """Private offer; transitions exactly once out of PROPOSED."""

    __tablename__ = "offers"
    __table_args__ = (
        CheckConstraint("proposed_price_minor >= 0", name="ck_offers_price_non_negative"),
        Index("ix_offers_listing_created", "listing_id", "created_at"),
        Index("ix_offers_buyer_created", "buyer_id", "created_at"),
        Index("ix_offers_store_created", "seller_store_id", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    # Relations
    listing_id: Mapped[str] = mapped_column(ForeignKey("listings.id"))
    buyer_id: Mapped[str] = mapped_column(String(36))
    seller_store_id: Mapped[str] = mapped_column(ForeignKey("stores.id"))

    # Terms (private)
    proposed_price_minor: Mapped[int] = mapped_column(Integer)
    currency: Mapped[str] = mapped_column(String(3), default="USD")
    buyer_message: Mapped[str | None] = mapped_column(Text)

    status: Mapped[OfferStatus] = mapped_column(
        Enum(OfferStatus, native_enum=False, length=20),
        default=OfferStatus.PROPOSED,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )
    accepted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    rejected_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    def __repr__(self) -> str:
        return f"<Offer {self.id} ({self.status.value})>"


class OfferReference(Base):
    """Public pointer to a private offer, posted into a thread.

    Carries an optional public note and nothing from the offer's terms.
    """

    __tablename__ = "offer_references"
    __table_args__ = (Index("ix_offer_references_thread_created", "thread_id", "created_at"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    offer_id: Mapped[str] = mapped_column(ForeignKey("offers.id"), index=True)
    thread_id: Mapped[str] = mapped_column(String(36))
    created_by_id: Mapped[str] = mapped_column(String(36))
    public_note: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<OfferReference {self.id} offer={self.offer_id} thread={self.thread_id}>"
