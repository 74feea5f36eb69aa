"""Order / purchase engine.

Both purchase paths run as a single transaction that locks the rows deciding
the outcome (offer, then listing), depletes stock and inserts the Order.
Either everything commits or nothing does.

Purchasing without prior interaction evidence is a normal, non-throwing
outcome: the caller gets a GatingRejection telling it what to do first.
"""

import logging
from dataclasses import dataclass, field

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bazaar.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from bazaar.models import ActivityType, Listing, Offer, OfferStatus, Order, OrderStatus, Store
from bazaar.services import activity, evidence
from bazaar.services.catalog import deplete_stock_in, lock_listing_in
from bazaar.services.offers import lock_offer_in
from bazaar.stores.postgres import get_session, utcnow

logger = logging.getLogger("uvicorn.error")

GATING_MESSAGE = "Ask a question, make an offer, or participate in a looking-for thread first"


@dataclass(frozen=True)
class GatingRejection:
    """Purchase blocked for lack of interaction evidence."""

    listing_id: str
    error: str = GATING_MESSAGE
    required_actions: list[str] = field(default_factory=lambda: list(evidence.REQUIRED_ACTIONS))

    success = False
    blocked = True

    def to_dict(self) -> dict:
        return {
            "success": False,
            "blocked": True,
            "error": self.error,
            "requiredActions": list(self.required_actions),
        }


@dataclass(frozen=True)
class PurchaseResult:
    order: Order
    listing: Listing

    success = True
    blocked = False


def _check_quantity(quantity: int) -> None:
    if quantity is None or quantity < 1:
        raise ValidationError("Quantity must be at least 1", detail={"quantity": quantity})


def _new_order(
    buyer_id: str,
    listing: Listing,
    quantity: int,
    unit_price_minor: int,
    currency: str,
    source_offer_id: str | None = None,
) -> Order:
    now = utcnow()
    return Order(
        buyer_id=buyer_id,
        store_id=listing.store_id,
        listing_id=listing.id,
        source_offer_id=source_offer_id,
        quantity=quantity,
        unit_price_minor=unit_price_minor,
        total_price_minor=unit_price_minor * quantity,
        currency=currency,
        status=OrderStatus.DELIVERED,
        placed_at=now,
        delivered_at=now,
    )


async def _emit_placed(order: Order) -> None:
    refs = {"store_id": order.store_id, "listing_id": order.listing_id, "order_id": order.id}
    await activity.emit(ActivityType.ORDER_PLACED, order.buyer_id, refs, {"quantity": order.quantity})
    await activity.emit(ActivityType.ORDER_DELIVERED, order.buyer_id, refs)


async def purchase_direct(buyer_id: str, listing_id: str, quantity: int = 1) -> PurchaseResult | GatingRejection:
    """Buy a listing at its current price.

    Args:
        buyer_id: Acting buyer.
        listing_id: Listing to buy.
        quantity: Units to buy (>= 1).

    Returns:
        PurchaseResult on success, GatingRejection if the buyer never
        interacted with this listing.

    Raises:
        NotFoundError: Listing does not exist.
        ConflictError: Listing not ACTIVE or not enough stock.
    """
    _check_quantity(quantity)

    async with get_session() as session:
        if not await evidence.has_evidence_in(session, buyer_id, listing_id):
            if await session.get(Listing, listing_id) is None:
                raise NotFoundError("Listing", listing_id)
            logger.info(f"Purchase blocked (no evidence): buyer={buyer_id} listing={listing_id}")
            return GatingRejection(listing_id=listing_id)

        listing = await lock_listing_in(session, listing_id)
        deplete_stock_in(listing, quantity)

        order = _new_order(buyer_id, listing, quantity, listing.price_minor, listing.currency)
        session.add(order)
        await session.flush()

    logger.info(f"Order {order.id}: buyer={buyer_id} listing={listing_id} qty={quantity} unit={order.unit_price_minor}")
    await _emit_placed(order)
    return PurchaseResult(order=order, listing=listing)


async def purchase_from_offer(buyer_id: str, offer_id: str, quantity: int = 1) -> PurchaseResult | GatingRejection:
    """Buy at an accepted offer's price.

    The accepted offer does not itself satisfy gating; evidence for the
    offer's listing is re-checked inside the transaction.

    Raises:
        NotFoundError: Offer or listing does not exist.
        ForbiddenError: Caller is not the offer's buyer.
        ConflictError: Offer not ACCEPTED, listing not ACTIVE, or not enough stock.
    """
    _check_quantity(quantity)

    async with get_session() as session:
        offer = await lock_offer_in(session, offer_id)
        if offer.buyer_id != buyer_id:
            raise ForbiddenError("This offer belongs to another buyer")
        if offer.status != OfferStatus.ACCEPTED:
            raise ConflictError(
                "Offer has not been accepted",
                detail={"status": offer.status.value},
            )

        if not await evidence.has_evidence_in(session, buyer_id, offer.listing_id):
            logger.info(f"Offer purchase blocked (no evidence): buyer={buyer_id} offer={offer_id}")
            return GatingRejection(listing_id=offer.listing_id)

        listing = await lock_listing_in(session, offer.listing_id)
        deplete_stock_in(listing, quantity)

        order = _new_order(
            buyer_id,
            listing,
            quantity,
            offer.proposed_price_minor,
            offer.currency,
            source_offer_id=offer.id,
        )
        session.add(order)
        await session.flush()

    logger.info(f"Order {order.id} from offer {offer_id}: qty={quantity} unit={order.unit_price_minor}")
    await _emit_placed(order)
    return PurchaseResult(order=order, listing=listing)


async def _seller_owns(session: AsyncSession, viewer_id: str, store_id: str) -> bool:
    store = await session.get(Store, store_id)
    return store is not None and store.owner_id == viewer_id


async def get_order(order_id: str, viewer_id: str) -> Order:
    """Order details for its buyer or the selling store's owner."""
    async with get_session() as session:
        order = await session.get(Order, order_id)
        if order is None:
            raise NotFoundError("Order", order_id)
        if order.buyer_id != viewer_id and not await _seller_owns(session, viewer_id, order.store_id):
            raise ForbiddenError("You do not have access to this order")
        return order


async def list_for_buyer(buyer_id: str, limit: int = 50) -> list[Order]:
    async with get_session() as session:
        result = await session.execute(
            select(Order).where(Order.buyer_id == buyer_id).order_by(Order.placed_at.desc()).limit(limit)
        )
        return list(result.scalars().all())
