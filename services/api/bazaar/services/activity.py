"""Activity feed.

One-way sink for narrative/audit events. Callers emit after their own
transaction has committed; a failing emit is logged and swallowed because
nothing in the marketplace core reads the feed back.
"""

import logging
from typing import Any

from sqlalchemy import select

from bazaar.models import ActivityEvent, ActivityType
from bazaar.stores.postgres import get_session

logger = logging.getLogger("uvicorn.error")

# Columns an emitter may reference. Offer ids are deliberately absent.
REF_FIELDS = (
    "store_id",
    "listing_id",
    "thread_id",
    "message_id",
    "order_id",
    "review_id",
    "store_update_id",
    "trust_event_id",
    "promotion_id",
    "offer_reference_id",
)


async def emit(
    event_type: ActivityType,
    actor_id: str | None,
    refs: dict[str, str | None] | None = None,
    meta: dict[str, Any] | None = None,
) -> ActivityEvent | None:
    """Append an event to the feed.

    Args:
        event_type: What happened.
        actor_id: Agent that caused it (None for system sweeps).
        refs: Entity references keyed by column name (see REF_FIELDS).
        meta: Free-form JSON payload. Must not carry private offer terms.

    Returns:
        The stored event, or None if the write failed.
    """
    refs = refs or {}
    unknown = set(refs) - set(REF_FIELDS)
    if unknown:
        raise ValueError(f"Unsupported activity refs: {sorted(unknown)}")

    try:
        async with get_session() as session:
            event = ActivityEvent(
                event_type=event_type,
                actor_id=actor_id,
                meta=meta or {},
                **refs,
            )
            session.add(event)
            await session.flush()
            return event
    except Exception:
        logger.exception(f"Activity emit failed: {event_type.value} actor={actor_id}")
        return None


async def get_recent(
    limit: int = 50,
    *,
    store_id: str | None = None,
    listing_id: str | None = None,
    event_type: ActivityType | None = None,
) -> list[ActivityEvent]:
    """Most recent events first, optionally filtered."""
    limit = max(1, min(limit, 200))
    query = select(ActivityEvent)
    if store_id:
        query = query.where(ActivityEvent.store_id == store_id)
    if listing_id:
        query = query.where(ActivityEvent.listing_id == listing_id)
    if event_type:
        query = query.where(ActivityEvent.event_type == event_type)
    query = query.order_by(ActivityEvent.created_at.desc(), ActivityEvent.id.desc()).limit(limit)

    async with get_session() as session:
        result = await session.execute(query)
        return list(result.scalars().all())
