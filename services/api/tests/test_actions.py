"""Typed agent actions: parsing and dispatch."""

from dataclasses import dataclass
from typing import get_args

import pytest

from bazaar.errors import ForbiddenError, ValidationError
from bazaar.models import OfferStatus
from bazaar.services import actions, trust_ledger
from bazaar.services.actions import (
    AcceptOffer,
    AskQuestion,
    MakeOffer,
    PostOfferReference,
    PurchaseDirect,
    PurchaseFromOffer,
    ReplyInThread,
    Skip,
    execute,
    parse_action,
)
from bazaar.services.orders import GatingRejection, PurchaseResult
from conftest import OFFER_MESSAGE, QUESTION


def test_parse_action():
    action = parse_action({"type": "make_offer", "listing_id": "l-1", "price_minor": 1500})
    assert action == MakeOffer(listing_id="l-1", price_minor=1500)

    # Numeric strings are coerced, so services only ever see ints.
    coerced = parse_action({"type": "make_offer", "listing_id": "l-1", "price_minor": "1500"})
    assert coerced.price_minor == 1500

    assert parse_action({"type": "participate_looking_for", "listing_id": "l-1", "thread_id": "t"}) == (
        actions.JoinLookingFor(listing_id="l-1", thread_id="t")
    )


@pytest.mark.parametrize(
    "payload",
    [
        {"type": "teleport"},
        {},
        {"type": "purchase_direct", "listing_id": "l-1", "discount": 50},
        {"type": "accept_offer"},
        {"type": "make_offer", "listing_id": "l-1", "price_minor": "a lot"},
        {"type": "leave_review", "order_id": "o-1", "rating": [5], "body": "Great kettle"},
        {"type": 7},
        ["make_offer", "l-1", 1500],
    ],
)
def test_parse_action_rejects_bad_payloads(payload):
    with pytest.raises(ValidationError):
        parse_action(payload)


def test_wrongly_typed_argument_is_reported():
    with pytest.raises(ValidationError) as exc_info:
        parse_action({"type": "make_offer", "listing_id": "l-1", "price_minor": "a lot"})

    errors = exc_info.value.detail["errors"]
    assert [e["loc"] for e in errors] == ["make_offer.price_minor"]
    assert "make_offer" in exc_info.value.detail["allowed"]


def test_actions_are_immutable():
    action = parse_action({"type": "accept_offer", "offer_id": "o-1"})
    with pytest.raises(ValueError):
        action.offer_id = "o-2"


def test_every_action_type_has_a_handler():
    union_members = get_args(get_args(actions.AgentAction)[0])
    assert set(union_members) == set(actions._HANDLERS)
    assert len(actions.ACTION_TYPES) == len(union_members)


@pytest.mark.asyncio
async def test_execute_unknown_action():
    @dataclass(frozen=True)
    class Dance:
        style: str

    with pytest.raises(TypeError):
        await execute("agent", Dance(style="tango"))


@pytest.mark.asyncio
async def test_skip_does_nothing():
    assert await execute("agent", Skip(reason="waiting for restock")) is None


@pytest.mark.asyncio
async def test_buyer_journey_through_actions(seller_id, buyer_id, listing):
    blocked = await execute(buyer_id, PurchaseDirect(listing_id=listing.id))
    assert isinstance(blocked, GatingRejection)

    await execute(buyer_id, AskQuestion(listing_id=listing.id, content=QUESTION))
    bought = await execute(buyer_id, PurchaseDirect(listing_id=listing.id))
    assert isinstance(bought, PurchaseResult)
    assert bought.listing.stock_on_hand == 4


@pytest.mark.asyncio
async def test_negotiated_purchase_through_actions(seller_id, buyer_id, listing):
    offer = await execute(buyer_id, MakeOffer(listing_id=listing.id, price_minor=3000, message=OFFER_MESSAGE))
    accepted = await execute(seller_id, AcceptOffer(offer_id=offer.id))
    assert accepted.status == OfferStatus.ACCEPTED

    result = await execute(buyer_id, PurchaseFromOffer(offer_id=offer.id))
    assert result.order.unit_price_minor == 3000


@pytest.mark.asyncio
async def test_reply_in_thread_requires_store_owner(seller_id, buyer_id, store):
    with pytest.raises(ForbiddenError):
        await execute(buyer_id, ReplyInThread(store_id=store.id, thread_id="t-1"))

    await execute(seller_id, ReplyInThread(store_id=store.id, thread_id="t-1"))
    profile = await trust_ledger.get_profile(store.id)
    assert profile.support_responsiveness_score == 53.0


@pytest.mark.asyncio
async def test_offer_reference_through_actions(seller_id, buyer_id, listing):
    offer = await execute(buyer_id, MakeOffer(listing_id=listing.id, price_minor=3000))

    action = parse_action(
        {"type": "create_offer_reference", "offer_id": offer.id, "thread_id": "t-1", "public_note": "See my offer"}
    )
    assert isinstance(action, PostOfferReference)

    ref = await execute(seller_id, action)
    assert ref.offer_id == offer.id
    assert ref.public_note == "See my offer"
