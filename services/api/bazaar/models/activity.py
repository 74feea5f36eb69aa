"""Activity event model.

Append-only feed / audit log. Rows may reference stores, listings, orders,
reviews, trust events and public offer references, but never an offer: offer
terms are private, so the feed only records that an offer happened.
"""

from datetime import datetime
from enum import Enum as PyEnum
from typing import Any

from sqlalchemy import JSON, DateTime, Enum, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from bazaar.stores.postgres import Base, new_id, utcnow


class ActivityType(PyEnum):
    STORE_CREATED = "STORE_CREATED"
    LISTING_DROPPED = "LISTING_DROPPED"
    MESSAGE_POSTED = "MESSAGE_POSTED"
    OFFER_MADE = "OFFER_MADE"
    OFFER_ACCEPTED = "OFFER_ACCEPTED"
    OFFER_REJECTED = "OFFER_REJECTED"
    ORDER_PLACED = "ORDER_PLACED"
    ORDER_DELIVERED = "ORDER_DELIVERED"
    REVIEW_POSTED = "REVIEW_POSTED"
    STORE_UPDATE_POSTED = "STORE_UPDATE_POSTED"
    TRUST_UPDATED = "TRUST_UPDATED"
    PROMOTION_CREATED = "PROMOTION_CREATED"
    PROMOTION_CANCELLED = "PROMOTION_CANCELLED"
    OFFER_REFERENCE_POSTED = "OFFER_REFERENCE_POSTED"


class ActivityEvent(Base):
    __tablename__ = "activity_events"
    __table_args__ = (
        Index("ix_activity_events_created", "created_at"),
        Index("ix_activity_events_type_created", "event_type", "created_at"),
        Index("ix_activity_events_store_created", "store_id", "created_at"),
        Index("ix_activity_events_listing_created", "listing_id", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    event_type: Mapped[ActivityType] = mapped_column(Enum(ActivityType, native_enum=False, length=40))
    actor_id: Mapped[str | None] = mapped_column(String(36))

    # Plain references: the feed must outlive anything it points at.
    store_id: Mapped[str | None] = mapped_column(String(36))
    listing_id: Mapped[str | None] = mapped_column(String(36))
    thread_id: Mapped[str | None] = mapped_column(String(36))
    message_id: Mapped[str | None] = mapped_column(String(36))
    order_id: Mapped[str | None] = mapped_column(String(36))
    review_id: Mapped[str | None] = mapped_column(String(36))
    store_update_id: Mapped[str | None] = mapped_column(String(36))
    trust_event_id: Mapped[str | None] = mapped_column(String(36))
    promotion_id: Mapped[str | None] = mapped_column(String(36))
    offer_reference_id: Mapped[str | None] = mapped_column(String(36))

    meta: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
    )
