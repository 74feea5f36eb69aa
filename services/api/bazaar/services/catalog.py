"""Stores, products and listings.

Listing inventory is only ever depleted from inside the purchase transaction
(`deplete_stock_in`); there is no public decrement. Restock is the only way a
SOLD_OUT listing becomes ACTIVE again.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bazaar.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from bazaar.models import (
    ActivityType,
    Listing,
    ListingStatus,
    Product,
    Store,
    StoreUpdate,
    TrustEvent,
    TrustProfile,
)
from bazaar.services import activity
from bazaar.services.trust import TrustReason, fixed_deltas
from bazaar.services.trust_ledger import apply_delta_in
from bazaar.stores.postgres import get_session

logger = logging.getLogger("uvicorn.error")


# =============================================================================
# Helpers (caller's session)
# =============================================================================


async def get_owned_store_in(session: AsyncSession, owner_id: str, store_id: str) -> Store:
    store = await session.get(Store, store_id)
    if store is None:
        raise NotFoundError("Store", store_id)
    if store.owner_id != owner_id:
        raise ForbiddenError("You do not own this store")
    return store


async def lock_listing_in(session: AsyncSession, listing_id: str) -> Listing:
    """Load a listing with an exclusive row lock for the rest of the transaction."""
    result = await session.execute(
        select(Listing).where(Listing.id == listing_id).with_for_update()
    )
    listing = result.scalar_one_or_none()
    if listing is None:
        raise NotFoundError("Listing", listing_id)
    return listing


async def get_owned_listing_in(session: AsyncSession, seller_id: str, listing_id: str) -> tuple[Listing, Store]:
    """Lock a listing and verify the caller owns its store."""
    listing = await lock_listing_in(session, listing_id)
    store = await session.get(Store, listing.store_id)
    if store is None or store.owner_id != seller_id:
        raise ForbiddenError("You do not own this listing")
    return listing, store


def deplete_stock_in(listing: Listing, quantity: int) -> None:
    """Decrement stock on a listing already locked by the purchase transaction."""
    if quantity < 1:
        raise ValidationError("Quantity must be at least 1")
    if listing.status != ListingStatus.ACTIVE:
        raise ConflictError("Listing is not available", detail={"status": listing.status.value})
    if listing.stock_on_hand < quantity:
        raise ConflictError(
            "Insufficient stock",
            detail={"requested": quantity, "available": listing.stock_on_hand},
        )

    listing.stock_on_hand -= quantity
    if listing.stock_on_hand == 0:
        listing.status = ListingStatus.SOLD_OUT
        logger.info(f"Listing {listing.id} sold out")


# =============================================================================
# Stores
# =============================================================================


async def create_store(
    owner_id: str,
    name: str,
    *,
    tagline: str | None = None,
    brand_voice: str | None = None,
    return_policy_text: str = "",
    shipping_policy_text: str = "",
) -> Store:
    """Create a store and its default trust profile."""
    if not name or not name.strip():
        raise ValidationError("Store name is required")

    async with get_session() as session:
        store = Store(
            owner_id=owner_id,
            name=name.strip(),
            tagline=tagline,
            brand_voice=brand_voice,
            return_policy_text=return_policy_text,
            shipping_policy_text=shipping_policy_text,
        )
        session.add(store)
        await session.flush()
        session.add(TrustProfile(store_id=store.id))
        await session.flush()

    logger.info(f"Store created: {store.name} ({store.id}) owner={owner_id}")
    await activity.emit(ActivityType.STORE_CREATED, owner_id, {"store_id": store.id})
    return store


async def get_store(store_id: str) -> Store:
    async with get_session() as session:
        store = await session.get(Store, store_id)
        if store is None:
            raise NotFoundError("Store", store_id)
        return store


async def list_stores(limit: int = 50, offset: int = 0) -> list[Store]:
    async with get_session() as session:
        result = await session.execute(
            select(Store).order_by(Store.created_at.desc()).limit(limit).offset(offset)
        )
        return list(result.scalars().all())


async def update_policies(
    owner_id: str,
    store_id: str,
    *,
    reason: str,
    return_policy_text: str | None = None,
    shipping_policy_text: str | None = None,
) -> tuple[Store, TrustEvent]:
    """Change store policies, write patch notes, and credit policy clarity.

    Raises:
        ValidationError: Missing reason, or nothing actually changed.
    """
    if not reason or not reason.strip():
        raise ValidationError("Reason is required for policy updates")

    async with get_session() as session:
        store = await get_owned_store_in(session, owner_id, store_id)

        changes: list[tuple[str, str, str]] = []
        if return_policy_text is not None and return_policy_text != store.return_policy_text:
            changes.append(("return_policy_text", store.return_policy_text, return_policy_text))
            store.return_policy_text = return_policy_text
        if shipping_policy_text is not None and shipping_policy_text != store.shipping_policy_text:
            changes.append(("shipping_policy_text", store.shipping_policy_text, shipping_policy_text))
            store.shipping_policy_text = shipping_policy_text

        if not changes:
            raise ValidationError("No policy changes detected")

        updates = [
            StoreUpdate(
                store_id=store.id,
                created_by_id=owner_id,
                update_type="POLICY_UPDATED",
                field_name=field,
                old_value=old,
                new_value=new,
                reason=reason.strip(),
            )
            for field, old, new in changes
        ]
        session.add_all(updates)
        await session.flush()

        trust_event = await apply_delta_in(
            session,
            store.id,
            TrustReason.POLICY_UPDATED,
            fixed_deltas(TrustReason.POLICY_UPDATED),
            meta={"fields": [field for field, _, _ in changes]},
        )

    for update in updates:
        await activity.emit(
            ActivityType.STORE_UPDATE_POSTED,
            owner_id,
            {"store_id": store.id, "store_update_id": update.id},
            {"update_type": update.update_type, "field": update.field_name},
        )
    await activity.emit(
        ActivityType.TRUST_UPDATED,
        None,
        {"store_id": store.id, "trust_event_id": trust_event.id},
        {"reason": TrustReason.POLICY_UPDATED.value},
    )
    return store, trust_event


# =============================================================================
# Products
# =============================================================================


async def create_product(owner_id: str, store_id: str, title: str, description: str = "") -> Product:
    """Create a product, or return the store's existing product with the same title."""
    if not title or not title.strip():
        raise ValidationError("Product title is required")
    title = title.strip()

    async with get_session() as session:
        await get_owned_store_in(session, owner_id, store_id)

        result = await session.execute(
            select(Product)
            .where(Product.store_id == store_id, func.lower(Product.title) == title.lower())
            .limit(1)
        )
        existing = result.scalar_one_or_none()
        if existing is not None:
            logger.info(f"Product '{title}' already exists in store {store_id}, reusing {existing.id}")
            return existing

        product = Product(store_id=store_id, title=title, description=description or "")
        session.add(product)
        await session.flush()
        return product


async def get_product(product_id: str) -> Product:
    async with get_session() as session:
        product = await session.get(Product, product_id)
        if product is None:
            raise NotFoundError("Product", product_id)
        return product


# =============================================================================
# Listings
# =============================================================================


async def create_listing(
    seller_id: str,
    store_id: str,
    product_id: str,
    price_minor: int,
    stock: int,
    currency: str = "USD",
) -> Listing:
    """Create a listing for one of the seller's products.

    Args:
        seller_id: Acting seller; must own the store.
        store_id: Store the listing is sold from.
        product_id: Product being sold; must belong to the store.
        price_minor: Price in minor units (>= 0).
        stock: Initial stock on hand (>= 0). Zero starts the listing SOLD_OUT.
        currency: ISO 4217 code.
    """
    if price_minor is None or price_minor < 0:
        raise ValidationError("Price must be >= 0", detail={"price_minor": price_minor})
    if stock is None or stock < 0:
        raise ValidationError("Stock must be >= 0", detail={"stock": stock})

    async with get_session() as session:
        await get_owned_store_in(session, seller_id, store_id)

        product = await session.get(Product, product_id)
        if product is None:
            raise NotFoundError("Product", product_id)
        if product.store_id != store_id:
            raise ForbiddenError("Product does not belong to this store")

        listing = Listing(
            store_id=store_id,
            product_id=product_id,
            price_minor=price_minor,
            currency=currency.upper(),
            stock_on_hand=stock,
            status=ListingStatus.ACTIVE if stock > 0 else ListingStatus.SOLD_OUT,
        )
        session.add(listing)
        await session.flush()

    logger.info(f"Listing created: {listing.id} store={store_id} price={price_minor} stock={stock}")
    await activity.emit(
        ActivityType.LISTING_DROPPED,
        seller_id,
        {"store_id": store_id, "listing_id": listing.id},
        {"price_minor": price_minor, "currency": listing.currency},
    )
    return listing


async def update_price(seller_id: str, listing_id: str, new_price: int, reason: str) -> Listing:
    """Change a listing's price and post a PRICE_UPDATED patch note."""
    if not reason or not reason.strip():
        raise ValidationError("Reason is required for price updates")
    if new_price is None or new_price < 0:
        raise ValidationError("Price must be >= 0", detail={"price_minor": new_price})

    async with get_session() as session:
        listing, store = await get_owned_listing_in(session, seller_id, listing_id)
        old_price = listing.price_minor
        listing.price_minor = new_price

        update = StoreUpdate(
            store_id=store.id,
            created_by_id=seller_id,
            update_type="PRICE_UPDATED",
            field_name="price_minor",
            old_value=str(old_price),
            new_value=str(new_price),
            reason=reason.strip(),
            linked_listing_id=listing.id,
        )
        session.add(update)
        await session.flush()

    logger.info(f"Listing {listing_id} price {old_price} -> {new_price}")
    await activity.emit(
        ActivityType.STORE_UPDATE_POSTED,
        seller_id,
        {"store_id": store.id, "listing_id": listing.id, "store_update_id": update.id},
        {"update_type": "PRICE_UPDATED", "old_price_minor": old_price, "new_price_minor": new_price},
    )
    return listing


async def restock(seller_id: str, listing_id: str, quantity: int) -> Listing:
    """Add stock; a SOLD_OUT listing becomes ACTIVE again."""
    if quantity is None or quantity < 1:
        raise ValidationError("Restock quantity must be at least 1")

    async with get_session() as session:
        listing, _ = await get_owned_listing_in(session, seller_id, listing_id)
        listing.stock_on_hand += quantity
        if listing.status == ListingStatus.SOLD_OUT:
            listing.status = ListingStatus.ACTIVE
        await session.flush()

    logger.info(f"Listing {listing_id} restocked +{quantity} -> {listing.stock_on_hand}")
    return listing


async def get_listing(listing_id: str) -> Listing:
    async with get_session() as session:
        listing = await session.get(Listing, listing_id)
        if listing is None:
            raise NotFoundError("Listing", listing_id)
        return listing


async def list_active(limit: int = 50, offset: int = 0) -> list[Listing]:
    """ACTIVE listings, newest first."""
    limit = max(1, min(limit, 200))
    async with get_session() as session:
        result = await session.execute(
            select(Listing)
            .where(Listing.status == ListingStatus.ACTIVE)
            .order_by(Listing.created_at.desc(), Listing.id)
            .limit(limit)
            .offset(max(0, offset))
        )
        return list(result.scalars().all())
