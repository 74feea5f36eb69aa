"""Trust ledger: the persistence side of trust deltas.

`apply_delta_in` is the single mutation point for TrustProfile. It locks the
profile row, applies clamped deltas and appends exactly one TrustEvent, all in
the caller's transaction.
"""

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bazaar.errors import NotFoundError
from bazaar.models import ActivityType, Store, TrustEvent, TrustProfile
from bazaar.services import activity
from bazaar.services.trust import TrustDeltas, TrustReason, apply_deltas, fixed_deltas
from bazaar.stores.postgres import get_session

logger = logging.getLogger("uvicorn.error")


@dataclass(frozen=True)
class TrustLinks:
    """Entities a trust event explains itself with."""

    order_id: str | None = None
    review_id: str | None = None
    thread_id: str | None = None


async def ensure_profile_in(session: AsyncSession, store_id: str) -> TrustProfile:
    """Get the store's profile under lock, creating it with defaults if missing."""
    result = await session.execute(
        select(TrustProfile).where(TrustProfile.store_id == store_id).with_for_update()
    )
    profile = result.scalar_one_or_none()
    if profile is None:
        profile = TrustProfile(store_id=store_id)
        session.add(profile)
        await session.flush()
    return profile


async def apply_delta_in(
    session: AsyncSession,
    store_id: str,
    reason: TrustReason,
    deltas: TrustDeltas,
    links: TrustLinks | None = None,
    meta: dict[str, Any] | None = None,
) -> TrustEvent:
    """Apply bounded deltas to a store's profile and log the event.

    Each dimension becomes clamp(score + delta, 0, 100). When clamping changes
    a result the event meta carries ``clamped`` with the affected dimensions.
    """
    links = links or TrustLinks()
    profile = await ensure_profile_in(session, store_id)

    new_scores, clamped = apply_deltas(profile.scores(), deltas)
    profile.set_scores(new_scores)

    event_meta = dict(meta or {})
    if clamped:
        event_meta["clamped"] = clamped

    event = TrustEvent(
        store_id=store_id,
        reason=reason,
        delta_overall=deltas.overall,
        delta_product_satisfaction=deltas.product_satisfaction,
        delta_claim_accuracy=deltas.claim_accuracy,
        delta_support_responsiveness=deltas.support_responsiveness,
        delta_policy_clarity=deltas.policy_clarity,
        linked_order_id=links.order_id,
        linked_review_id=links.review_id,
        linked_thread_id=links.thread_id,
        meta=event_meta,
    )
    session.add(event)
    await session.flush()

    logger.info(
        f"Trust {reason.value} store={store_id} overall={profile.overall_score:.1f}"
        + (f" clamped={','.join(clamped)}" if clamped else "")
    )
    return event


async def apply_delta(
    store_id: str,
    reason: TrustReason,
    deltas: TrustDeltas,
    links: TrustLinks | None = None,
    meta: dict[str, Any] | None = None,
) -> TrustEvent:
    """Standalone variant of `apply_delta_in` (own transaction)."""
    async with get_session() as session:
        store = await session.get(Store, store_id)
        if store is None:
            raise NotFoundError("Store", store_id)
        event = await apply_delta_in(session, store_id, reason, deltas, links, meta)

    await activity.emit(
        ActivityType.TRUST_UPDATED,
        None,
        {"store_id": store_id, "trust_event_id": event.id},
        {"reason": reason.value},
    )
    return event


async def record_merchant_reply(store_id: str, thread_id: str | None = None) -> TrustEvent:
    """Reward a merchant for answering a buyer in a thread."""
    return await apply_delta(
        store_id,
        TrustReason.MERCHANT_REPLIED_IN_THREAD,
        fixed_deltas(TrustReason.MERCHANT_REPLIED_IN_THREAD),
        TrustLinks(thread_id=thread_id),
    )


async def get_profile(store_id: str) -> TrustProfile:
    async with get_session() as session:
        result = await session.execute(select(TrustProfile).where(TrustProfile.store_id == store_id))
        profile = result.scalar_one_or_none()
        if profile is None:
            raise NotFoundError("TrustProfile", store_id)
        return profile


async def get_events(store_id: str, limit: int = 50) -> list[TrustEvent]:
    """Newest first."""
    limit = max(1, min(limit, 200))
    async with get_session() as session:
        result = await session.execute(
            select(TrustEvent)
            .where(TrustEvent.store_id == store_id)
            .order_by(TrustEvent.created_at.desc(), TrustEvent.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())


async def get_leaderboard(limit: int = 10) -> list[tuple[Store, TrustProfile]]:
    """Stores ranked by overall trust score."""
    limit = max(1, min(limit, 100))
    async with get_session() as session:
        result = await session.execute(
            select(Store, TrustProfile)
            .join(TrustProfile, TrustProfile.store_id == Store.id)
            .order_by(TrustProfile.overall_score.desc(), Store.created_at)
            .limit(limit)
        )
        return [(store, profile) for store, profile in result.all()]
