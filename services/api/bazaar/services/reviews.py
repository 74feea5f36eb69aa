"""Reviews and the trust delta they produce.

One review per order: checked in the transaction and backed by the UNIQUE
constraint on reviews.order_id. A concurrent loser that slips past the check
hits the constraint and gets the same ValidationError.
"""

import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from bazaar.errors import ForbiddenError, NotFoundError, ValidationError
from bazaar.models import ActivityType, Order, OrderStatus, Review, TrustEvent
from bazaar.services import activity
from bazaar.services.trust import TrustReason, review_deltas
from bazaar.services.trust_ledger import TrustLinks, apply_delta_in
from bazaar.stores.postgres import get_session

logger = logging.getLogger("uvicorn.error")

ALREADY_REVIEWED = "Order already reviewed"


@dataclass(frozen=True)
class ReviewResult:
    review: Review
    trust_event: TrustEvent


async def leave_review(
    buyer_id: str,
    order_id: str,
    rating: int,
    title: str | None,
    body: str,
) -> ReviewResult:
    """Review a delivered order and move the store's trust profile.

    Preconditions, in order: order exists, caller is its buyer, order is
    DELIVERED, no review exists yet.

    Raises:
        ValidationError: Bad rating/body, undelivered order, already reviewed.
        NotFoundError: Order does not exist.
        ForbiddenError: Caller did not buy this order.
    """
    if rating is None or not 1 <= rating <= 5:
        raise ValidationError("Rating must be between 1 and 5", detail={"rating": rating})
    if not body or not body.strip():
        raise ValidationError("Review body is required")

    try:
        async with get_session() as session:
            order = await session.get(Order, order_id)
            if order is None:
                raise NotFoundError("Order", order_id)
            if order.buyer_id != buyer_id:
                raise ForbiddenError("Only the buyer can review this order")
            if order.status != OrderStatus.DELIVERED:
                raise ValidationError("Order has not been delivered", detail={"status": order.status.value})

            existing = await session.execute(select(Review.id).where(Review.order_id == order_id))
            if existing.scalar_one_or_none() is not None:
                raise ValidationError(ALREADY_REVIEWED)

            review = Review(
                order_id=order_id,
                author_id=buyer_id,
                rating=rating,
                title=title.strip() if title else None,
                body=body.strip(),
            )
            session.add(review)
            await session.flush()

            trust_event = await apply_delta_in(
                session,
                order.store_id,
                TrustReason.REVIEW_POSTED,
                review_deltas(rating),
                TrustLinks(order_id=order.id, review_id=review.id),
                meta={"rating": rating},
            )
    except IntegrityError:
        logger.warning(f"Concurrent review rejected by constraint: order={order_id}")
        raise ValidationError(ALREADY_REVIEWED) from None

    logger.info(f"Review {review.id} on order {order_id}: rating={rating}")
    await activity.emit(
        ActivityType.REVIEW_POSTED,
        buyer_id,
        {
            "store_id": order.store_id,
            "listing_id": order.listing_id,
            "order_id": order.id,
            "review_id": review.id,
        },
        {"rating": rating},
    )
    await activity.emit(
        ActivityType.TRUST_UPDATED,
        None,
        {"store_id": order.store_id, "trust_event_id": trust_event.id},
        {"reason": TrustReason.REVIEW_POSTED.value},
    )
    return ReviewResult(review=review, trust_event=trust_event)


async def get_reviews_for_listing(listing_id: str, limit: int = 50) -> list[Review]:
    """Reviews of orders placed on a listing, newest first."""
    async with get_session() as session:
        result = await session.execute(
            select(Review)
            .join(Order, Order.id == Review.order_id)
            .where(Order.listing_id == listing_id)
            .order_by(Review.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
