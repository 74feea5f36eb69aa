"""Stores, products and listings."""

import pytest
from sqlalchemy import select

from bazaar.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from bazaar.models import ActivityType, ListingStatus, StoreUpdate
from bazaar.services import activity, catalog, trust_ledger
from bazaar.services.trust import TrustReason
from bazaar.stores.postgres import get_session, new_id


@pytest.mark.asyncio
async def test_create_store_emits_activity(seller_id):
    store = await catalog.create_store(seller_id, "  Night Market  ")

    assert store.name == "Night Market"
    profile = await trust_ledger.get_profile(store.id)
    assert profile.overall_score == 50.0

    events = await activity.get_recent(store_id=store.id)
    assert [e.event_type for e in events] == [ActivityType.STORE_CREATED]


@pytest.mark.asyncio
async def test_create_store_requires_name(seller_id):
    with pytest.raises(ValidationError):
        await catalog.create_store(seller_id, "   ")


@pytest.mark.asyncio
async def test_create_product_reuses_same_title(seller_id, store):
    first = await catalog.create_product(seller_id, store.id, "Desk Lamp")
    second = await catalog.create_product(seller_id, store.id, "desk lamp")

    assert first.id == second.id


@pytest.mark.asyncio
async def test_create_product_in_foreign_store(store):
    with pytest.raises(ForbiddenError):
        await catalog.create_product(new_id(), store.id, "Desk Lamp")


@pytest.mark.asyncio
async def test_create_listing(seller_id, store):
    product = await catalog.create_product(seller_id, store.id, "Desk Lamp")
    listing = await catalog.create_listing(seller_id, store.id, product.id, 2599, 3, currency="eur")

    assert listing.status == ListingStatus.ACTIVE
    assert listing.stock_on_hand == 3
    assert listing.currency == "EUR"

    events = await activity.get_recent(listing_id=listing.id)
    assert events[0].event_type == ActivityType.LISTING_DROPPED


@pytest.mark.asyncio
async def test_listing_with_zero_stock_starts_sold_out(make_listing):
    listing = await make_listing(stock=0)
    assert listing.status == ListingStatus.SOLD_OUT


@pytest.mark.asyncio
@pytest.mark.parametrize(("price", "stock"), [(-1, 1), (100, -1)])
async def test_create_listing_rejects_negative_values(seller_id, store, price, stock):
    product = await catalog.create_product(seller_id, store.id, "Desk Lamp")
    with pytest.raises(ValidationError):
        await catalog.create_listing(seller_id, store.id, product.id, price, stock)


@pytest.mark.asyncio
async def test_create_listing_for_product_of_another_store(seller_id, store):
    other = await catalog.create_store(seller_id, "Other Store")
    product = await catalog.create_product(seller_id, other.id, "Desk Lamp")

    with pytest.raises(ForbiddenError):
        await catalog.create_listing(seller_id, store.id, product.id, 1000, 1)


@pytest.mark.asyncio
async def test_create_listing_unknown_product(seller_id, store):
    with pytest.raises(NotFoundError):
        await catalog.create_listing(seller_id, store.id, "missing", 1000, 1)


@pytest.mark.asyncio
async def test_update_price_writes_patch_note(seller_id, listing):
    updated = await catalog.update_price(seller_id, listing.id, 3999, "Spring sale")
    assert updated.price_minor == 3999

    async with get_session() as session:
        result = await session.execute(select(StoreUpdate).where(StoreUpdate.linked_listing_id == listing.id))
        note = result.scalar_one()
    assert note.update_type == "PRICE_UPDATED"
    assert (note.old_value, note.new_value) == ("4999", "3999")
    assert note.reason == "Spring sale"

    events = await activity.get_recent(listing_id=listing.id, event_type=ActivityType.STORE_UPDATE_POSTED)
    assert events[0].store_update_id == note.id


@pytest.mark.asyncio
async def test_update_price_requires_reason(seller_id, listing):
    with pytest.raises(ValidationError):
        await catalog.update_price(seller_id, listing.id, 3999, " ")


@pytest.mark.asyncio
async def test_update_price_by_non_owner(listing):
    with pytest.raises(ForbiddenError):
        await catalog.update_price(new_id(), listing.id, 3999, "Hostile takeover")


@pytest.mark.asyncio
async def test_restock_reactivates_sold_out_listing(seller_id, make_listing):
    listing = await make_listing(stock=0)

    restocked = await catalog.restock(seller_id, listing.id, 4)
    assert restocked.status == ListingStatus.ACTIVE
    assert restocked.stock_on_hand == 4

    with pytest.raises(ValidationError):
        await catalog.restock(seller_id, listing.id, 0)


@pytest.mark.asyncio
async def test_deplete_stock_rules(make_listing):
    listing = await make_listing(stock=2)

    with pytest.raises(ConflictError):
        catalog.deplete_stock_in(listing, 3)
    catalog.deplete_stock_in(listing, 2)
    assert listing.stock_on_hand == 0
    assert listing.status == ListingStatus.SOLD_OUT
    with pytest.raises(ConflictError):
        catalog.deplete_stock_in(listing, 1)


@pytest.mark.asyncio
async def test_list_active_excludes_sold_out(make_listing):
    active = await make_listing()
    await make_listing(stock=0)

    assert [l.id for l in await catalog.list_active()] == [active.id]


@pytest.mark.asyncio
async def test_update_policies_applies_trust_delta(seller_id, store):
    updated, event = await catalog.update_policies(
        seller_id,
        store.id,
        reason="Clarify return window",
        return_policy_text="Returns within 45 days, any reason.",
    )

    assert updated.return_policy_text == "Returns within 45 days, any reason."
    assert event.reason == TrustReason.POLICY_UPDATED
    assert event.meta["fields"] == ["return_policy_text"]

    profile = await trust_ledger.get_profile(store.id)
    assert profile.policy_clarity_score == 52.0
    assert profile.overall_score == 50.5


@pytest.mark.asyncio
async def test_update_policies_without_changes(seller_id, store):
    with pytest.raises(ValidationError, match="No policy changes"):
        await catalog.update_policies(
            seller_id,
            store.id,
            reason="Nothing really",
            return_policy_text=store.return_policy_text,
        )

    assert await trust_ledger.get_events(store.id) == []


@pytest.mark.asyncio
async def test_update_policies_requires_reason(seller_id, store):
    with pytest.raises(ValidationError):
        await catalog.update_policies(seller_id, store.id, reason="", shipping_policy_text="Next day.")
