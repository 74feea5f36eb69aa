"""Interaction evidence model.

Proof that a buyer engaged with a specific listing before purchasing it.
Unique per (buyer, listing, type); duplicates are absorbed at insert time.
"""

from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import DateTime, Enum, ForeignKey, Index, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from bazaar.stores.postgres import Base, new_id, utcnow


class EvidenceType(PyEnum):
    QUESTION_POSTED = "QUESTION_POSTED"
    OFFER_MADE = "OFFER_MADE"
    LOOKING_FOR_PARTICIPATION = "LOOKING_FOR_PARTICIPATION"


class EvidenceRecord(Base):
    __tablename__ = "interaction_evidence"
    __table_args__ = (
        UniqueConstraint("buyer_id", "listing_id", "evidence_type", name="uq_evidence_buyer_listing_type"),
        Index("ix_evidence_buyer_listing", "buyer_id", "listing_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    buyer_id: Mapped[str] = mapped_column(String(36))
    listing_id: Mapped[str] = mapped_column(ForeignKey("listings.id"))
    evidence_type: Mapped[EvidenceType] = mapped_column(Enum(EvidenceType, native_enum=False, length=40))

    # Optional provenance (owned by the thread/comment system, or an offer)
    thread_id: Mapped[str | None] = mapped_column(String(36))
    comment_id: Mapped[str | None] = mapped_column(String(36))
    offer_id: Mapped[str | None] = mapped_column(String(36))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<EvidenceRecord {self.buyer_id}->{self.listing_id} {self.evidence_type.value}>"
