#!/usr/bin/env python3
"""Seed database with a small demo marketplace.

Creates:
- Seller agents, each with a store, products and listings
- A buyer who asks a question, makes an offer and buys
- A review (moves the store's trust profile) and a couple of promotions

Goes through the service layer, so every invariant and activity event is the
same as for real traffic. Not idempotent: running it twice creates a second
set of stores.

Usage:
    cd services/api
    python -m scripts.seed
"""

import asyncio
import os
import sys

# Add parent to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv

load_dotenv()

from bazaar.services import catalog, evidence, offers, orders, promotions, reviews  # noqa: E402
from bazaar.services.orders import PurchaseResult  # noqa: E402
from bazaar.stores.postgres import close_db, create_tables, init_db, new_id  # noqa: E402

# ============================================================
# Demo data
# ============================================================

SELLERS = [
    {
        "name": "Loom & Lantern",
        "tagline": "Handwoven goods for slow mornings",
        "return_policy_text": "Returns within 30 days, unused.",
        "shipping_policy_text": "Ships in 2 business days.",
        "products": [
            ("Wool Throw Blanket", "Merino, 130x170cm", 8900, 4),
            ("Linen Tea Towels (set of 3)", "Stonewashed linen", 2400, 12),
        ],
    },
    {
        "name": "Circuit Bazaar",
        "tagline": "Refurbished gadgets, honestly graded",
        "return_policy_text": "14-day returns on all refurbished items.",
        "shipping_policy_text": "Tracked shipping, 3-5 days.",
        "products": [
            ("Mechanical Keyboard", "Hot-swap, brown switches", 4999, 1),
            ("USB-C Dock", "7-in-1, 100W passthrough", 3500, 6),
        ],
    },
]


async def seed_database() -> None:
    """Seed a demo marketplace."""
    await init_db()
    await create_tables()

    try:
        listings = []
        for seller in SELLERS:
            seller_id = new_id()
            store = await catalog.create_store(
                seller_id,
                seller["name"],
                tagline=seller["tagline"],
                return_policy_text=seller["return_policy_text"],
                shipping_policy_text=seller["shipping_policy_text"],
            )
            for title, description, price, stock in seller["products"]:
                product = await catalog.create_product(seller_id, store.id, title, description)
                listing = await catalog.create_listing(seller_id, store.id, product.id, price, stock)
                listings.append((seller_id, store, listing))
            print(f"  Store: {store.name} ({len(seller['products'])} listings)")

        buyer_id = new_id()

        # Direct purchase after a question
        seller_id, store, listing = listings[0]
        await evidence.ask_question(
            buyer_id,
            listing.id,
            "Is the blanket machine washable or dry clean only?",
        )
        result = await orders.purchase_direct(buyer_id, listing.id)
        if isinstance(result, PurchaseResult):
            await reviews.leave_review(buyer_id, result.order.id, 5, "Lovely", "Warm, soft, and exactly as described.")
            print(f"  Order + review on {listing.id}")

        # Negotiated purchase
        seller_id, store, listing = listings[2]
        offer = await offers.make_offer(buyer_id, listing.id, 4200, "Would you take 42 for the keyboard?")
        await offers.accept(seller_id, offer.id)
        await orders.purchase_from_offer(buyer_id, offer.id)
        print(f"  Offer-based order on {listing.id}")

        # Promotions on whatever is still in stock
        for seller_id, store, listing in listings:
            current = await catalog.get_listing(listing.id)
            if current.stock_on_hand > 0:
                await promotions.create_promotion(seller_id, current.id, current.price_minor * 8 // 10)
        print(f"  Active promotions: {len(await promotions.get_active_promotions())}")

        print("\nSeed completed successfully!")
    finally:
        await close_db()


if __name__ == "__main__":
    asyncio.run(seed_database())
