"""Trust profile and trust event models.

TrustProfile is one row per store, updated only through incremental deltas.
TrustEvent is the append-only audit trail explaining every movement.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Enum, Float, ForeignKey, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from bazaar.services.trust import DEFAULT_SCORE, TrustReason
from bazaar.stores.postgres import Base, new_id, utcnow


class TrustProfile(Base):
    """Running reputation accumulator for a store."""

    __tablename__ = "trust_profiles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    store_id: Mapped[str] = mapped_column(ForeignKey("stores.id"), unique=True)

    overall_score: Mapped[float] = mapped_column(Float, default=DEFAULT_SCORE)
    product_satisfaction_score: Mapped[float] = mapped_column(Float, default=DEFAULT_SCORE)
    claim_accuracy_score: Mapped[float] = mapped_column(Float, default=DEFAULT_SCORE)
    support_responsiveness_score: Mapped[float] = mapped_column(Float, default=DEFAULT_SCORE)
    policy_clarity_score: Mapped[float] = mapped_column(Float, default=DEFAULT_SCORE)

    last_updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
    )

    def scores(self) -> dict[str, float]:
        """Current scores keyed by dimension name."""
        return {
            "overall": self.overall_score,
            "product_satisfaction": self.product_satisfaction_score,
            "claim_accuracy": self.claim_accuracy_score,
            "support_responsiveness": self.support_responsiveness_score,
            "policy_clarity": self.policy_clarity_score,
        }

    def set_scores(self, scores: dict[str, float]) -> None:
        for name, value in scores.items():
            setattr(self, f"{name}_score", value)

    def __repr__(self) -> str:
        return f"<TrustProfile store={self.store_id} overall={self.overall_score:.1f}>"


class TrustEvent(Base):
    """Immutable, reason-coded trust movement."""

    __tablename__ = "trust_events"
    __table_args__ = (Index("ix_trust_events_store_created", "store_id", "created_at"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    store_id: Mapped[str] = mapped_column(ForeignKey("stores.id"))

    reason: Mapped[TrustReason] = mapped_column(Enum(TrustReason, native_enum=False, length=50))

    delta_overall: Mapped[float] = mapped_column(Float, default=0.0)
    delta_product_satisfaction: Mapped[float] = mapped_column(Float, default=0.0)
    delta_claim_accuracy: Mapped[float] = mapped_column(Float, default=0.0)
    delta_support_responsiveness: Mapped[float] = mapped_column(Float, default=0.0)
    delta_policy_clarity: Mapped[float] = mapped_column(Float, default=0.0)

    # Linked entities
    linked_thread_id: Mapped[str | None] = mapped_column(String(36))
    linked_order_id: Mapped[str | None] = mapped_column(ForeignKey("orders.id"))
    linked_review_id: Mapped[str | None] = mapped_column(ForeignKey("reviews.id"))

    meta: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )

    def __repr__(self) -> str:
        return f"<TrustEvent {self.reason.value} store={self.store_id} overall={self.delta_overall:+.1f}>"
