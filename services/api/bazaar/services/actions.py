"""Typed agent actions.

Agents (LLM-driven or scripted) choose one action per tick. At this boundary
an action is a small frozen pydantic model tagged by its wire name in `type`;
`execute` dispatches on the model class through a fixed table, so adding an
action means adding a model AND a handler. `parse_action` validates the wire
form ``{"type": "make_offer", ...}`` against the discriminated union, so an
unknown name, a missing or unexpected argument, or a wrongly typed value is
a 400 before any service runs.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from bazaar.errors import ForbiddenError, ValidationError
from bazaar.services import catalog, evidence, offers, orders, promotions, reviews, trust_ledger

logger = logging.getLogger("uvicorn.error")


class _Action(BaseModel):
    model_config = {"extra": "forbid", "frozen": True}


class CreateProduct(_Action):
    type: Literal["create_product"] = "create_product"
    store_id: str
    title: str
    description: str = ""


class CreateListing(_Action):
    type: Literal["create_listing"] = "create_listing"
    store_id: str
    product_id: str
    price_minor: int
    stock: int
    currency: str = "USD"


class AskQuestion(_Action):
    type: Literal["ask_question"] = "ask_question"
    listing_id: str
    content: str
    thread_id: str | None = None


class JoinLookingFor(_Action):
    type: Literal["participate_looking_for"] = "participate_looking_for"
    listing_id: str
    thread_id: str


class MakeOffer(_Action):
    type: Literal["make_offer"] = "make_offer"
    listing_id: str
    price_minor: int
    message: str | None = None


class AcceptOffer(_Action):
    type: Literal["accept_offer"] = "accept_offer"
    offer_id: str


class RejectOffer(_Action):
    type: Literal["reject_offer"] = "reject_offer"
    offer_id: str


class PostOfferReference(_Action):
    type: Literal["create_offer_reference"] = "create_offer_reference"
    offer_id: str
    thread_id: str
    public_note: str | None = None


class PurchaseDirect(_Action):
    type: Literal["purchase_direct"] = "purchase_direct"
    listing_id: str
    quantity: int = 1


class PurchaseFromOffer(_Action):
    type: Literal["purchase_from_offer"] = "purchase_from_offer"
    offer_id: str
    quantity: int = 1


class LeaveReview(_Action):
    type: Literal["leave_review"] = "leave_review"
    order_id: str
    rating: int
    body: str
    title: str | None = None


class ReplyInThread(_Action):
    type: Literal["reply_in_thread"] = "reply_in_thread"
    store_id: str
    thread_id: str


class UpdatePrice(_Action):
    type: Literal["update_price"] = "update_price"
    listing_id: str
    new_price_minor: int
    reason: str


class UpdatePolicies(_Action):
    type: Literal["update_policies"] = "update_policies"
    store_id: str
    reason: str
    return_policy_text: str | None = None
    shipping_policy_text: str | None = None


class CreatePromotion(_Action):
    type: Literal["create_promotion"] = "create_promotion"
    listing_id: str
    promo_price_minor: int


class CancelPromotion(_Action):
    type: Literal["cancel_promotion"] = "cancel_promotion"
    promotion_id: str


class Skip(_Action):
    type: Literal["skip"] = "skip"
    reason: str = ""


AgentAction = Annotated[
    Union[
        CreateProduct,
        CreateListing,
        AskQuestion,
        JoinLookingFor,
        MakeOffer,
        AcceptOffer,
        RejectOffer,
        PostOfferReference,
        PurchaseDirect,
        PurchaseFromOffer,
        LeaveReview,
        ReplyInThread,
        UpdatePrice,
        UpdatePolicies,
        CreatePromotion,
        CancelPromotion,
        Skip,
    ],
    Field(discriminator="type"),
]

_ACTION_ADAPTER = TypeAdapter(AgentAction)


async def _reply_in_thread(actor_id: str, action: ReplyInThread) -> Any:
    store = await catalog.get_store(action.store_id)
    if store.owner_id != actor_id:
        raise ForbiddenError("Only the store owner can reply as the merchant")
    return await trust_ledger.record_merchant_reply(store.id, action.thread_id)


async def _skip(actor_id: str, action: Skip) -> None:
    logger.info(f"Agent {actor_id} skipped: {action.reason or 'no reason'}")
    return None


_HANDLERS: dict[type, Callable[[str, Any], Awaitable[Any]]] = {
    CreateProduct: lambda actor, a: catalog.create_product(actor, a.store_id, a.title, a.description),
    CreateListing: lambda actor, a: catalog.create_listing(
        actor, a.store_id, a.product_id, a.price_minor, a.stock, a.currency
    ),
    AskQuestion: lambda actor, a: evidence.ask_question(actor, a.listing_id, a.content, thread_id=a.thread_id),
    JoinLookingFor: lambda actor, a: evidence.join_looking_for(actor, a.listing_id, a.thread_id),
    MakeOffer: lambda actor, a: offers.make_offer(actor, a.listing_id, a.price_minor, a.message),
    AcceptOffer: lambda actor, a: offers.accept(actor, a.offer_id),
    RejectOffer: lambda actor, a: offers.reject(actor, a.offer_id),
    PostOfferReference: lambda actor, a: offers.create_offer_reference(
        actor, a.offer_id, a.thread_id, a.public_note
    ),
    PurchaseDirect: lambda actor, a: orders.purchase_direct(actor, a.listing_id, a.quantity),
    PurchaseFromOffer: lambda actor, a: orders.purchase_from_offer(actor, a.offer_id, a.quantity),
    LeaveReview: lambda actor, a: reviews.leave_review(actor, a.order_id, a.rating, a.title, a.body),
    ReplyInThread: _reply_in_thread,
    UpdatePrice: lambda actor, a: catalog.update_price(actor, a.listing_id, a.new_price_minor, a.reason),
    UpdatePolicies: lambda actor, a: catalog.update_policies(
        actor,
        a.store_id,
        reason=a.reason,
        return_policy_text=a.return_policy_text,
        shipping_policy_text=a.shipping_policy_text,
    ),
    CreatePromotion: lambda actor, a: promotions.create_promotion(actor, a.listing_id, a.promo_price_minor),
    CancelPromotion: lambda actor, a: promotions.cancel_promotion(actor, a.promotion_id),
    Skip: _skip,
}

# Wire name -> action model
ACTION_TYPES: dict[str, type] = {cls.model_fields["type"].default: cls for cls in _HANDLERS}


def parse_action(payload: Any) -> AgentAction:
    """Build a typed action from ``{"type": name, **args}``.

    Raises:
        ValidationError: Unknown action name, missing or unexpected arguments,
            or an argument of the wrong type.
    """
    try:
        return _ACTION_ADAPTER.validate_python(payload)
    except PydanticValidationError as e:
        errors = [
            {"loc": ".".join(str(part) for part in err["loc"]), "msg": err["msg"], "type": err["type"]}
            for err in e.errors()
        ]
        name = payload.get("type") if isinstance(payload, dict) else None
        raise ValidationError(
            f"Invalid action {name!r}: {errors[0]['msg']}",
            detail={"errors": errors, "allowed": sorted(ACTION_TYPES)},
        ) from None


async def execute(actor_id: str, action: AgentAction) -> Any:
    """Run one action as `actor_id` and return the service result."""
    handler = _HANDLERS.get(type(action))
    if handler is None:
        raise TypeError(f"Unsupported action: {type(action).__name__}")
    logger.info(f"Agent {actor_id} -> {action.type}")
    return await handler(actor_id, action)
