"""Purchase engine: gating, stock safety and price fidelity."""

import asyncio

import pytest
from sqlalchemy import func, select

from bazaar.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from bazaar.models import ActivityType, ListingStatus, Order, OrderStatus
from bazaar.services import activity, catalog, evidence, offers, orders
from bazaar.services.orders import GATING_MESSAGE, GatingRejection, PurchaseResult
from bazaar.stores.postgres import get_session, new_id
from conftest import OFFER_MESSAGE, QUESTION


async def _order_count(listing_id: str) -> int:
    async with get_session() as session:
        result = await session.execute(
            select(func.count()).select_from(Order).where(Order.listing_id == listing_id)
        )
        return int(result.scalar_one())


@pytest.mark.asyncio
async def test_purchase_without_evidence_is_blocked(buyer_id, listing):
    result = await orders.purchase_direct(buyer_id, listing.id)

    assert isinstance(result, GatingRejection)
    assert result.to_dict() == {
        "success": False,
        "blocked": True,
        "error": GATING_MESSAGE,
        "requiredActions": ["ask_question", "make_offer", "participate_looking_for"],
    }
    assert await _order_count(listing.id) == 0
    assert (await catalog.get_listing(listing.id)).stock_on_hand == 5


@pytest.mark.asyncio
async def test_purchase_after_question(buyer_id, listing):
    await evidence.ask_question(buyer_id, listing.id, QUESTION)

    result = await orders.purchase_direct(buyer_id, listing.id, quantity=2)

    assert isinstance(result, PurchaseResult)
    order = result.order
    assert order.status == OrderStatus.DELIVERED
    assert order.quantity == 2
    assert order.unit_price_minor == 4999
    assert order.total_price_minor == 9998
    assert order.delivered_at is not None
    assert result.listing.stock_on_hand == 3

    events = await activity.get_recent(listing_id=listing.id)
    types = [e.event_type for e in events]
    assert ActivityType.ORDER_PLACED in types
    assert ActivityType.ORDER_DELIVERED in types


@pytest.mark.asyncio
async def test_evidence_on_other_listing_does_not_unlock(buyer_id, make_listing):
    engaged = await make_listing()
    target = await make_listing()
    await evidence.ask_question(buyer_id, engaged.id, QUESTION)

    result = await orders.purchase_direct(buyer_id, target.id)
    assert isinstance(result, GatingRejection)


@pytest.mark.asyncio
async def test_purchase_unknown_listing(buyer_id):
    with pytest.raises(NotFoundError):
        await orders.purchase_direct(buyer_id, "missing")


@pytest.mark.asyncio
async def test_purchase_quantity_must_be_positive(buyer_id, listing):
    await evidence.ask_question(buyer_id, listing.id, QUESTION)
    with pytest.raises(ValidationError):
        await orders.purchase_direct(buyer_id, listing.id, quantity=0)


@pytest.mark.asyncio
async def test_insufficient_stock_leaves_listing_untouched(buyer_id, make_listing):
    listing = await make_listing(stock=2)
    await evidence.ask_question(buyer_id, listing.id, QUESTION)

    with pytest.raises(ConflictError, match="Insufficient stock"):
        await orders.purchase_direct(buyer_id, listing.id, quantity=3)

    assert (await catalog.get_listing(listing.id)).stock_on_hand == 2
    assert await _order_count(listing.id) == 0


@pytest.mark.asyncio
async def test_last_unit_race_has_one_winner(make_listing):
    listing = await make_listing(stock=1)
    buyers = [new_id() for _ in range(2)]
    for buyer in buyers:
        await evidence.ask_question(buyer, listing.id, QUESTION)

    results = await asyncio.gather(
        *[orders.purchase_direct(buyer, listing.id) for buyer in buyers],
        return_exceptions=True,
    )

    assert sum(isinstance(r, PurchaseResult) for r in results) == 1
    assert sum(isinstance(r, ConflictError) for r in results) == 1

    final = await catalog.get_listing(listing.id)
    assert final.stock_on_hand == 0
    assert final.status == ListingStatus.SOLD_OUT
    assert await _order_count(listing.id) == 1


@pytest.mark.asyncio
async def test_concurrent_purchases_never_oversell(make_listing):
    listing = await make_listing(stock=3)
    buyers = [new_id() for _ in range(6)]
    for buyer in buyers:
        await evidence.ask_question(buyer, listing.id, QUESTION)

    results = await asyncio.gather(
        *[orders.purchase_direct(buyer, listing.id) for buyer in buyers],
        return_exceptions=True,
    )

    assert sum(isinstance(r, PurchaseResult) for r in results) == 3
    final = await catalog.get_listing(listing.id)
    assert final.stock_on_hand == 0
    assert await _order_count(listing.id) == 3


@pytest.mark.asyncio
async def test_offer_purchase_uses_offer_price(seller_id, buyer_id, listing):
    offer = await offers.make_offer(buyer_id, listing.id, 2000, OFFER_MESSAGE)
    await offers.accept(seller_id, offer.id)
    # Listing price moves after acceptance; the offer price still applies.
    await catalog.update_price(seller_id, listing.id, 6000, "Supplier costs went up")

    result = await orders.purchase_from_offer(buyer_id, offer.id)

    assert isinstance(result, PurchaseResult)
    assert result.order.unit_price_minor == 2000
    assert result.order.source_offer_id == offer.id


@pytest.mark.asyncio
async def test_direct_purchase_uses_current_listing_price(seller_id, buyer_id, listing):
    offer = await offers.make_offer(buyer_id, listing.id, 2000, OFFER_MESSAGE)
    await offers.accept(seller_id, offer.id)

    result = await orders.purchase_direct(buyer_id, listing.id)

    assert result.order.unit_price_minor == 4999
    assert result.order.source_offer_id is None


@pytest.mark.asyncio
async def test_offer_purchase_requires_acceptance(buyer_id, listing):
    offer = await offers.make_offer(buyer_id, listing.id, 2000)
    with pytest.raises(ConflictError):
        await orders.purchase_from_offer(buyer_id, offer.id)


@pytest.mark.asyncio
async def test_offer_purchase_by_other_buyer(seller_id, buyer_id, listing):
    offer = await offers.make_offer(buyer_id, listing.id, 2000)
    await offers.accept(seller_id, offer.id)

    with pytest.raises(ForbiddenError):
        await orders.purchase_from_offer(new_id(), offer.id)


@pytest.mark.asyncio
async def test_offer_purchase_on_sold_out_listing(seller_id, buyer_id, make_listing):
    listing = await make_listing(stock=1)
    offer = await offers.make_offer(buyer_id, listing.id, 2000)
    await offers.accept(seller_id, offer.id)

    other = new_id()
    await evidence.ask_question(other, listing.id, QUESTION)
    await orders.purchase_direct(other, listing.id)

    with pytest.raises(ConflictError, match="not available"):
        await orders.purchase_from_offer(buyer_id, offer.id)


@pytest.mark.asyncio
async def test_order_visibility(seller_id, buyer_id, listing):
    await evidence.ask_question(buyer_id, listing.id, QUESTION)
    result = await orders.purchase_direct(buyer_id, listing.id)

    assert (await orders.get_order(result.order.id, buyer_id)).id == result.order.id
    assert (await orders.get_order(result.order.id, seller_id)).id == result.order.id
    with pytest.raises(ForbiddenError):
        await orders.get_order(result.order.id, new_id())

    assert [o.id for o in await orders.list_for_buyer(buyer_id)] == [result.order.id]
