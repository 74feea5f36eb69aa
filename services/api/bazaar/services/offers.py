"""Offer negotiation.

State machine: PROPOSED -> ACCEPTED | REJECTED, terminal. The offer row is
locked for every transition so concurrent accept/reject calls serialize; the
loser observes the new status and gets a ConflictError.

Offer terms (price, message) are private to the buyer and the seller store's
owner. The activity feed and the public listing view only learn that an offer
exists.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bazaar.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from bazaar.models import (
    ActivityType,
    EvidenceType,
    Listing,
    ListingStatus,
    Offer,
    OfferReference,
    OfferStatus,
    Store,
)
from bazaar.services import activity, evidence
from bazaar.settings import get_settings
from bazaar.stores.postgres import get_session, utcnow

logger = logging.getLogger("uvicorn.error")


@dataclass(frozen=True)
class OfferSummary:
    """Public view of an offer: no price, no message."""

    id: str
    listing_id: str
    buyer_id: str
    status: OfferStatus
    created_at: datetime


def _validate_terms(price: int, message: str | None) -> str | None:
    settings = get_settings()
    if price is None or price < settings.min_offer_price_minor:
        raise ValidationError(
            f"Offer price must be at least {settings.min_offer_price_minor}",
            detail={"min_price_minor": settings.min_offer_price_minor},
        )
    if message is not None and message.strip():
        message = message.strip()
        if len(message) < settings.min_offer_message_len:
            raise ValidationError(
                f"Offer message must be at least {settings.min_offer_message_len} characters",
                detail={"min_length": settings.min_offer_message_len},
            )
        return message
    return None


async def lock_offer_in(session: AsyncSession, offer_id: str) -> Offer:
    result = await session.execute(select(Offer).where(Offer.id == offer_id).with_for_update())
    offer = result.scalar_one_or_none()
    if offer is None:
        raise NotFoundError("Offer", offer_id)
    return offer


async def _seller_owns(session: AsyncSession, seller_id: str, store_id: str) -> bool:
    store = await session.get(Store, store_id)
    return store is not None and store.owner_id == seller_id


async def make_offer(buyer_id: str, listing_id: str, price: int, message: str | None = None) -> Offer:
    """Propose a private price on a listing.

    Also records OFFER_MADE purchase evidence in the same transaction, so a
    buyer who made an offer is always eligible to buy.

    Raises:
        ValidationError: Price below the minimum, or message too short.
        NotFoundError: Listing does not exist.
        ConflictError: Listing is not ACTIVE.
    """
    message = _validate_terms(price, message)

    async with get_session() as session:
        listing = await session.get(Listing, listing_id)
        if listing is None:
            raise NotFoundError("Listing", listing_id)
        if listing.status != ListingStatus.ACTIVE:
            raise ConflictError("Listing is not accepting offers", detail={"status": listing.status.value})

        offer = Offer(
            listing_id=listing.id,
            buyer_id=buyer_id,
            seller_store_id=listing.store_id,
            proposed_price_minor=price,
            currency=listing.currency,
            buyer_message=message,
            status=OfferStatus.PROPOSED,
        )
        session.add(offer)
        await session.flush()

        await evidence.record_in(
            session,
            buyer_id,
            listing.id,
            EvidenceType.OFFER_MADE,
            offer_id=offer.id,
        )

    logger.info(f"Offer {offer.id} made on listing {listing_id} by {buyer_id}")
    await activity.emit(
        ActivityType.OFFER_MADE,
        buyer_id,
        {"store_id": offer.seller_store_id, "listing_id": offer.listing_id},
    )
    return offer


async def _transition(seller_id: str, offer_id: str, target: OfferStatus) -> Offer:
    async with get_session() as session:
        offer = await lock_offer_in(session, offer_id)
        if not await _seller_owns(session, seller_id, offer.seller_store_id):
            raise ForbiddenError("You do not own the store this offer was made to")
        if offer.status != OfferStatus.PROPOSED:
            raise ConflictError(
                f"Offer is already {offer.status.value}",
                detail={"status": offer.status.value},
            )

        offer.status = target
        if target == OfferStatus.ACCEPTED:
            offer.accepted_at = utcnow()
        else:
            offer.rejected_at = utcnow()
        await session.flush()

    logger.info(f"Offer {offer_id} {target.value} by {seller_id}")
    event_type = ActivityType.OFFER_ACCEPTED if target == OfferStatus.ACCEPTED else ActivityType.OFFER_REJECTED
    await activity.emit(
        event_type,
        seller_id,
        {"store_id": offer.seller_store_id, "listing_id": offer.listing_id},
    )
    return offer


async def accept(seller_id: str, offer_id: str) -> Offer:
    """Accept a PROPOSED offer. Exactly one concurrent accept/reject wins."""
    return await _transition(seller_id, offer_id, OfferStatus.ACCEPTED)


async def reject(seller_id: str, offer_id: str) -> Offer:
    """Reject a PROPOSED offer."""
    return await _transition(seller_id, offer_id, OfferStatus.REJECTED)


async def get_offer(offer_id: str, viewer_id: str) -> Offer:
    """Full offer, visible only to its buyer and the seller store's owner."""
    async with get_session() as session:
        offer = await session.get(Offer, offer_id)
        if offer is None:
            raise NotFoundError("Offer", offer_id)
        if offer.buyer_id != viewer_id and not await _seller_owns(session, viewer_id, offer.seller_store_id):
            raise ForbiddenError("You do not have access to this offer")
        return offer


async def list_for_store(seller_id: str, store_id: str, status: OfferStatus | None = None) -> list[Offer]:
    """Offers received by a store (owner only)."""
    async with get_session() as session:
        store = await session.get(Store, store_id)
        if store is None:
            raise NotFoundError("Store", store_id)
        if store.owner_id != seller_id:
            raise ForbiddenError("You do not own this store")

        query = select(Offer).where(Offer.seller_store_id == store_id)
        if status is not None:
            query = query.where(Offer.status == status)
        result = await session.execute(query.order_by(Offer.created_at.desc()).limit(100))
        return list(result.scalars().all())


async def list_for_buyer(buyer_id: str) -> list[Offer]:
    async with get_session() as session:
        result = await session.execute(
            select(Offer).where(Offer.buyer_id == buyer_id).order_by(Offer.created_at.desc()).limit(100)
        )
        return list(result.scalars().all())


async def list_for_listing(listing_id: str) -> list[OfferSummary]:
    """Public offer activity on a listing. Terms are never included."""
    async with get_session() as session:
        result = await session.execute(
            select(Offer.id, Offer.listing_id, Offer.buyer_id, Offer.status, Offer.created_at)
            .where(Offer.listing_id == listing_id)
            .order_by(Offer.created_at.desc())
            .limit(100)
        )
        return [OfferSummary(*row) for row in result.all()]


# =============================================================================
# Public references
# =============================================================================


async def create_offer_reference(
    agent_id: str,
    offer_id: str,
    thread_id: str,
    public_note: str | None = None,
) -> OfferReference:
    """Post a public pointer to an offer into a thread.

    Either party to the offer may post one. The reference and its activity
    event carry the optional note only, never the offer's price or message.

    Raises:
        ValidationError: Missing thread.
        NotFoundError: Offer does not exist.
        ForbiddenError: Caller is neither the buyer nor the seller.
    """
    if not thread_id or not thread_id.strip():
        raise ValidationError("Thread is required for an offer reference")

    offer = await get_offer(offer_id, agent_id)

    async with get_session() as session:
        ref = OfferReference(
            offer_id=offer.id,
            thread_id=thread_id.strip(),
            created_by_id=agent_id,
            public_note=public_note.strip() if public_note and public_note.strip() else None,
        )
        session.add(ref)
        await session.flush()

    logger.info(f"Offer reference {ref.id} posted to thread {ref.thread_id} by {agent_id}")
    await activity.emit(
        ActivityType.OFFER_REFERENCE_POSTED,
        agent_id,
        {
            "store_id": offer.seller_store_id,
            "listing_id": offer.listing_id,
            "thread_id": ref.thread_id,
            "offer_reference_id": ref.id,
        },
    )
    return ref


async def list_references_for_thread(thread_id: str, limit: int = 50) -> list[OfferReference]:
    """Offer references posted in a thread, newest first."""
    limit = max(1, min(limit, 200))
    async with get_session() as session:
        result = await session.execute(
            select(OfferReference)
            .where(OfferReference.thread_id == thread_id)
            .order_by(OfferReference.created_at.desc(), OfferReference.id)
            .limit(limit)
        )
        return list(result.scalars().all())
