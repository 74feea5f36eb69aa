"""Promotion queue.

Bounded featured slots for discounted listings:
- at most MAX_ACTIVE promotions are ACTIVE at a time
- at most MAX_OPEN promotions are ACTIVE or QUEUED
- at most one open promotion per listing (partial unique index)

Extra promotions wait as QUEUED and take freed slots in FIFO order of
`position`. A slot frees up when a promotion expires (only in
`expire_stale`) or is cancelled.

Creation, cancellation and the sweep all take a queue-wide transaction lock
before counting, so the global bounds hold when callers race. On PostgreSQL
this is an advisory xact lock; on SQLite BEGIN IMMEDIATE already serializes
writers.

The promo price is display-only. Purchases always use the listing price.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from sqlalchemy import func, select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bazaar.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from bazaar.models import ActivityType, ListingStatus, Promotion, PromotionStatus
from bazaar.models.promotion import OPEN_STATUSES
from bazaar.services import activity
from bazaar.services.catalog import get_owned_listing_in
from bazaar.settings import get_settings
from bazaar.stores.postgres import get_session, is_postgres, utcnow
from bazaar.stores.redis import invalidate_promotions_cache

logger = logging.getLogger("uvicorn.error")

MAX_ACTIVE = 3
MAX_OPEN = 10

# Arbitrary but stable key for pg_advisory_xact_lock
_QUEUE_LOCK_KEY = 7_340_021


@dataclass
class SweepResult:
    """Outcome of one expiry sweep."""

    expired: list[str] = field(default_factory=list)
    activated: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"expired": self.expired, "activated": self.activated, "failed": self.failed}


async def _lock_queue(session: AsyncSession) -> None:
    if is_postgres(session):
        await session.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": _QUEUE_LOCK_KEY})


def _expires_at(now: datetime) -> datetime:
    return now + timedelta(hours=get_settings().promotion_duration_hours)


async def _count(session: AsyncSession, *statuses: PromotionStatus) -> int:
    result = await session.execute(
        select(func.count()).select_from(Promotion).where(Promotion.status.in_(statuses))
    )
    return int(result.scalar_one())


async def _refill_active_slots(session: AsyncSession, now: datetime) -> list[Promotion]:
    """Promote the oldest QUEUED promotions into free ACTIVE slots."""
    free = MAX_ACTIVE - await _count(session, PromotionStatus.ACTIVE)
    if free <= 0:
        return []

    result = await session.execute(
        select(Promotion)
        .where(Promotion.status == PromotionStatus.QUEUED)
        .order_by(Promotion.position, Promotion.created_at)
        .limit(free)
        .with_for_update()
    )
    promoted = list(result.scalars().all())
    for promo in promoted:
        promo.status = PromotionStatus.ACTIVE
        promo.activated_at = now
        promo.expires_at = _expires_at(now)
        logger.info(f"Promotion {promo.id} activated from queue (position {promo.position})")
    await session.flush()
    return promoted


async def create_promotion(seller_id: str, listing_id: str, promo_price: int) -> Promotion:
    """Queue a promotion for one of the seller's listings.

    The promotion is ACTIVE immediately when a slot is free, QUEUED otherwise.

    Raises:
        ValidationError: promo_price not in (0, listing price).
        NotFoundError: Listing does not exist.
        ForbiddenError: Caller does not own the listing.
        ConflictError: Listing not ACTIVE, listing already promoted, or queue full.
    """
    if promo_price is None or promo_price <= 0:
        raise ValidationError("Promo price must be greater than 0", detail={"promo_price_minor": promo_price})

    try:
        async with get_session() as session:
            await _lock_queue(session)
            listing, store = await get_owned_listing_in(session, seller_id, listing_id)

            if listing.status != ListingStatus.ACTIVE:
                raise ConflictError("Only ACTIVE listings can be promoted", detail={"status": listing.status.value})
            if promo_price >= listing.price_minor:
                raise ValidationError(
                    "Promo price must be lower than the current price",
                    detail={"promo_price_minor": promo_price, "price_minor": listing.price_minor},
                )

            existing = await session.execute(
                select(Promotion.id).where(
                    Promotion.listing_id == listing_id,
                    Promotion.status.in_(OPEN_STATUSES),
                )
            )
            if existing.scalar_one_or_none() is not None:
                raise ConflictError("Listing already has an active or queued promotion")

            open_count = await _count(session, *OPEN_STATUSES)
            if open_count >= MAX_OPEN:
                raise ConflictError("Promotion queue is full", detail={"max_open": MAX_OPEN})
            active_count = await _count(session, PromotionStatus.ACTIVE)

            result = await session.execute(select(func.coalesce(func.max(Promotion.position), 0)))
            position = int(result.scalar_one()) + 1

            now = utcnow()
            promo = Promotion(
                listing_id=listing.id,
                store_id=store.id,
                seller_id=seller_id,
                original_price_minor=listing.price_minor,
                promo_price_minor=promo_price,
                position=position,
                created_at=now,
            )
            if active_count < MAX_ACTIVE:
                promo.status = PromotionStatus.ACTIVE
                promo.activated_at = now
                promo.expires_at = _expires_at(now)
            else:
                promo.status = PromotionStatus.QUEUED
            session.add(promo)
            await session.flush()
    except IntegrityError:
        raise ConflictError("Listing already has an active or queued promotion") from None

    logger.info(f"Promotion {promo.id} created for listing {listing_id}: {promo.status.value} pos={position}")
    await invalidate_promotions_cache()
    await activity.emit(
        ActivityType.PROMOTION_CREATED,
        seller_id,
        {"store_id": promo.store_id, "listing_id": promo.listing_id, "promotion_id": promo.id},
        {"status": promo.status.value, "promo_price_minor": promo_price},
    )
    return promo


async def cancel_promotion(seller_id: str, promo_id: str) -> Promotion:
    """Cancel an open promotion; a freed ACTIVE slot is refilled immediately."""
    async with get_session() as session:
        await _lock_queue(session)
        result = await session.execute(
            select(Promotion).where(Promotion.id == promo_id).with_for_update()
        )
        promo = result.scalar_one_or_none()
        if promo is None:
            raise NotFoundError("Promotion", promo_id)
        if promo.seller_id != seller_id:
            raise ForbiddenError("You do not own this promotion")
        if promo.status not in OPEN_STATUSES:
            raise ConflictError(f"Promotion is already {promo.status.value}", detail={"status": promo.status.value})

        was_active = promo.status == PromotionStatus.ACTIVE
        promo.status = PromotionStatus.CANCELLED
        await session.flush()

        promoted = await _refill_active_slots(session, utcnow()) if was_active else []

    logger.info(f"Promotion {promo_id} cancelled by {seller_id}; activated {len(promoted)} from queue")
    await invalidate_promotions_cache()
    await activity.emit(
        ActivityType.PROMOTION_CANCELLED,
        seller_id,
        {"store_id": promo.store_id, "listing_id": promo.listing_id, "promotion_id": promo.id},
    )
    return promo


async def expire_stale(now: datetime | None = None) -> SweepResult:
    """Expire ACTIVE promotions past expires_at, then refill free slots.

    The only place ACTIVE -> EXPIRED happens. A row that fails to expire is
    logged and skipped; it stays ACTIVE until the next sweep.
    """
    now = now or utcnow()
    sweep = SweepResult()

    async with get_session() as session:
        await _lock_queue(session)
        result = await session.execute(
            select(Promotion)
            .where(
                Promotion.status == PromotionStatus.ACTIVE,
                Promotion.expires_at <= now,
            )
            .order_by(Promotion.expires_at)
            .with_for_update()
        )
        for promo in result.scalars().all():
            # Read before the savepoint; a rollback expires the instance.
            promo_id = promo.id
            try:
                async with session.begin_nested():
                    promo.status = PromotionStatus.EXPIRED
                    await session.flush()
                sweep.expired.append(promo_id)
            except Exception:
                logger.exception(f"Failed to expire promotion {promo_id}")
                sweep.failed.append(promo_id)

        promoted = await _refill_active_slots(session, now)
        sweep.activated = [p.id for p in promoted]

    if sweep.expired or sweep.activated:
        logger.info(
            f"Promotion sweep: expired={len(sweep.expired)} activated={len(sweep.activated)} failed={len(sweep.failed)}"
        )
        await invalidate_promotions_cache()
    return sweep


async def get_active_promotions() -> list[Promotion]:
    """Currently featured promotions (never more than MAX_ACTIVE)."""
    async with get_session() as session:
        result = await session.execute(
            select(Promotion)
            .where(Promotion.status == PromotionStatus.ACTIVE)
            .order_by(Promotion.position)
            .limit(MAX_ACTIVE)
        )
        return list(result.scalars().all())


async def get_queue() -> list[Promotion]:
    """QUEUED promotions in activation order."""
    async with get_session() as session:
        result = await session.execute(
            select(Promotion)
            .where(Promotion.status == PromotionStatus.QUEUED)
            .order_by(Promotion.position, Promotion.created_at)
            .limit(MAX_OPEN)
        )
        return list(result.scalars().all())


async def get_store_promotion(store_id: str) -> Promotion | None:
    """The store's currently featured promotion, most recently activated first.

    Queued promotions are not featured yet and are never returned.
    """
    async with get_session() as session:
        result = await session.execute(
            select(Promotion)
            .where(Promotion.store_id == store_id, Promotion.status == PromotionStatus.ACTIVE)
            .order_by(Promotion.activated_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()
