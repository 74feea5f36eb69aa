"""Interaction evidence ledger.

A buyer may purchase a listing only after engaging with it (question, offer,
looking-for participation). Recording is idempotent through the
UNIQUE(buyer_id, listing_id, evidence_type) constraint and an
ON CONFLICT DO NOTHING insert; there is no read-then-write check that could
race.

The `*_in` helpers take a caller's session so evidence can be written in the
same transaction as the action producing it (e.g. making an offer).
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bazaar.errors import NotFoundError, ValidationError
from bazaar.models import ActivityType, EvidenceRecord, EvidenceType, Listing
from bazaar.services import activity
from bazaar.settings import get_settings
from bazaar.stores.postgres import dialect_insert, get_session, new_id, utcnow

logger = logging.getLogger("uvicorn.error")

# Remediation hints returned to agents blocked by the purchase gate.
REQUIRED_ACTIONS = ["ask_question", "make_offer", "participate_looking_for"]


async def record_in(
    session: AsyncSession,
    buyer_id: str,
    listing_id: str,
    evidence_type: EvidenceType,
    *,
    thread_id: str | None = None,
    comment_id: str | None = None,
    offer_id: str | None = None,
) -> EvidenceRecord:
    """Insert-or-ignore an evidence row inside an open transaction."""
    stmt = (
        dialect_insert(session, EvidenceRecord.__table__)
        .values(
            id=new_id(),
            buyer_id=buyer_id,
            listing_id=listing_id,
            evidence_type=evidence_type,
            thread_id=thread_id,
            comment_id=comment_id,
            offer_id=offer_id,
            created_at=utcnow(),
        )
        .on_conflict_do_nothing(index_elements=["buyer_id", "listing_id", "evidence_type"])
    )
    result = await session.execute(stmt)
    if result.rowcount == 0:
        logger.debug(
            f"Evidence already recorded: buyer={buyer_id} listing={listing_id} type={evidence_type.value}"
        )

    row = await session.execute(
        select(EvidenceRecord).where(
            EvidenceRecord.buyer_id == buyer_id,
            EvidenceRecord.listing_id == listing_id,
            EvidenceRecord.evidence_type == evidence_type,
        )
    )
    return row.scalar_one()


async def record(
    buyer_id: str,
    listing_id: str,
    evidence_type: EvidenceType,
    *,
    thread_id: str | None = None,
    comment_id: str | None = None,
    offer_id: str | None = None,
) -> EvidenceRecord:
    """Record that a buyer engaged with a listing.

    A duplicate (buyer, listing, type) is absorbed: the persisted row is
    returned and the caller cannot tell it apart from a fresh insert.
    """
    async with get_session() as session:
        return await record_in(
            session,
            buyer_id,
            listing_id,
            evidence_type,
            thread_id=thread_id,
            comment_id=comment_id,
            offer_id=offer_id,
        )


async def has_evidence_in(session: AsyncSession, buyer_id: str, listing_id: str) -> bool:
    result = await session.execute(
        select(EvidenceRecord.id)
        .where(
            EvidenceRecord.buyer_id == buyer_id,
            EvidenceRecord.listing_id == listing_id,
        )
        .limit(1)
    )
    return result.scalar_one_or_none() is not None


async def has_evidence(buyer_id: str, listing_id: str) -> bool:
    """Whether the buyer may purchase this listing. Scoped to the listing, never the product."""
    async with get_session() as session:
        return await has_evidence_in(session, buyer_id, listing_id)


async def get_evidence(buyer_id: str, listing_id: str) -> list[EvidenceRecord]:
    async with get_session() as session:
        result = await session.execute(
            select(EvidenceRecord)
            .where(
                EvidenceRecord.buyer_id == buyer_id,
                EvidenceRecord.listing_id == listing_id,
            )
            .order_by(EvidenceRecord.created_at)
        )
        return list(result.scalars().all())


# =============================================================================
# Evidence-producing interactions
# =============================================================================


async def ask_question(
    buyer_id: str,
    listing_id: str,
    content: str,
    *,
    thread_id: str | None = None,
    comment_id: str | None = None,
) -> EvidenceRecord:
    """Post a question about a listing; makes the buyer purchase-eligible.

    Short questions are rejected so that a throwaway message cannot unlock
    the purchase gate.
    """
    settings = get_settings()
    content = (content or "").strip()
    if len(content) < settings.min_question_len:
        raise ValidationError(
            f"Question must be at least {settings.min_question_len} characters",
            detail={"min_length": settings.min_question_len},
        )

    comment_id = comment_id or new_id()
    async with get_session() as session:
        listing = await session.get(Listing, listing_id)
        if listing is None:
            raise NotFoundError("Listing", listing_id)
        store_id = listing.store_id
        record_row = await record_in(
            session,
            buyer_id,
            listing_id,
            EvidenceType.QUESTION_POSTED,
            thread_id=thread_id,
            comment_id=comment_id,
        )

    await activity.emit(
        ActivityType.MESSAGE_POSTED,
        buyer_id,
        {"store_id": store_id, "listing_id": listing_id, "thread_id": thread_id, "message_id": comment_id},
        {"kind": "question", "content": content[:500]},
    )
    return record_row


async def join_looking_for(buyer_id: str, listing_id: str, thread_id: str) -> EvidenceRecord:
    """Record that the buyer took part in a looking-for thread about this listing."""
    async with get_session() as session:
        if await session.get(Listing, listing_id) is None:
            raise NotFoundError("Listing", listing_id)
        return await record_in(
            session,
            buyer_id,
            listing_id,
            EvidenceType.LOOKING_FOR_PARTICIPATION,
            thread_id=thread_id,
        )
