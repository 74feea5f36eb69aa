"""Reviews and the trust deltas they apply."""

import asyncio

import pytest
from sqlalchemy import false, func, select

from bazaar.errors import ForbiddenError, NotFoundError, ValidationError
from bazaar.models import Review
from bazaar.services import evidence, orders, reviews, trust_ledger
from bazaar.services.trust import TrustReason
from bazaar.stores.postgres import get_session, new_id
from conftest import QUESTION


@pytest.fixture
async def order(buyer_id, listing):
    await evidence.ask_question(buyer_id, listing.id, QUESTION)
    result = await orders.purchase_direct(buyer_id, listing.id)
    return result.order


@pytest.mark.asyncio
async def test_review_moves_trust_profile(buyer_id, store, order):
    result = await reviews.leave_review(buyer_id, order.id, 5, "Great", "Exactly as described.")

    assert result.review.rating == 5
    assert result.trust_event.reason == TrustReason.REVIEW_POSTED
    assert result.trust_event.linked_review_id == result.review.id
    assert result.trust_event.linked_order_id == order.id

    profile = await trust_ledger.get_profile(store.id)
    assert profile.overall_score == 55.0
    assert profile.product_satisfaction_score == 58.0
    assert profile.policy_clarity_score == 50.0


@pytest.mark.asyncio
async def test_negative_review(buyer_id, store, order):
    await reviews.leave_review(buyer_id, order.id, 1, None, "Arrived broken.")

    profile = await trust_ledger.get_profile(store.id)
    assert profile.overall_score == 45.0
    assert profile.product_satisfaction_score == 42.0


@pytest.mark.asyncio
async def test_second_review_rejected(buyer_id, order):
    await reviews.leave_review(buyer_id, order.id, 4, None, "Pretty good.")

    with pytest.raises(ValidationError, match="already reviewed"):
        await reviews.leave_review(buyer_id, order.id, 2, None, "Changed my mind.")


@pytest.mark.asyncio
async def test_concurrent_reviews_leave_one_row(buyer_id, store, order):
    results = await asyncio.gather(
        reviews.leave_review(buyer_id, order.id, 5, None, "First!"),
        reviews.leave_review(buyer_id, order.id, 5, None, "Also first!"),
        return_exceptions=True,
    )

    assert sum(isinstance(r, reviews.ReviewResult) for r in results) == 1
    assert sum(isinstance(r, ValidationError) for r in results) == 1

    async with get_session() as session:
        count = await session.execute(
            select(func.count()).select_from(Review).where(Review.order_id == order.id)
        )
    assert count.scalar_one() == 1
    assert len(await trust_ledger.get_events(store.id)) == 1


@pytest.mark.asyncio
async def test_unique_constraint_backs_up_the_review_check(buyer_id, store, order, monkeypatch):
    await reviews.leave_review(buyer_id, order.id, 4, None, "Pretty good.")

    # Blind the in-transaction lookup so the insert reaches the UNIQUE constraint.
    monkeypatch.setattr(reviews, "select", lambda *cols: select(*cols).where(false()))

    with pytest.raises(ValidationError) as exc_info:
        await reviews.leave_review(buyer_id, order.id, 1, None, "Changed my mind.")
    assert exc_info.value.message == reviews.ALREADY_REVIEWED

    async with get_session() as session:
        count = await session.execute(
            select(func.count()).select_from(Review).where(Review.order_id == order.id)
        )
    assert count.scalar_one() == 1
    assert len(await trust_ledger.get_events(store.id)) == 1


@pytest.mark.asyncio
async def test_only_buyer_can_review(order):
    with pytest.raises(ForbiddenError):
        await reviews.leave_review(new_id(), order.id, 5, None, "Drive-by review.")


@pytest.mark.asyncio
async def test_review_unknown_order(buyer_id):
    with pytest.raises(NotFoundError):
        await reviews.leave_review(buyer_id, "missing", 5, None, "Ghost order.")


@pytest.mark.asyncio
@pytest.mark.parametrize("rating", [0, 6])
async def test_rating_out_of_range(buyer_id, order, rating):
    with pytest.raises(ValidationError):
        await reviews.leave_review(buyer_id, order.id, rating, None, "Off the scale.")


@pytest.mark.asyncio
async def test_review_body_required(buyer_id, order):
    with pytest.raises(ValidationError):
        await reviews.leave_review(buyer_id, order.id, 4, "Title only", "  ")


@pytest.mark.asyncio
async def test_reviews_for_listing(buyer_id, listing, order):
    result = await reviews.leave_review(buyer_id, order.id, 3, None, "It's fine.")

    listed = await reviews.get_reviews_for_listing(listing.id)
    assert [r.id for r in listed] == [result.review.id]
