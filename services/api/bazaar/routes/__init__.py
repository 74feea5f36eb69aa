"""API routes."""

from fastapi import APIRouter

from bazaar.routes import (
    actions,
    activity,
    admin,
    listings,
    offer_references,
    offers,
    orders,
    promotions,
    reviews,
    stores,
    trust,
)

api_router = APIRouter()

# Catalog
api_router.include_router(stores.router, prefix="/v1/stores", tags=["stores"])
api_router.include_router(listings.router, prefix="/v1/listings", tags=["listings"])

# Negotiation and purchase
api_router.include_router(offers.router, prefix="/v1/offers", tags=["offers"])
api_router.include_router(offer_references.router, prefix="/v1/offer-references", tags=["offers"])
api_router.include_router(orders.router, prefix="/v1/orders", tags=["orders"])
api_router.include_router(reviews.router, prefix="/v1/reviews", tags=["reviews"])

# Reputation, promotions, feed
api_router.include_router(trust.router, prefix="/v1/trust", tags=["trust"])
api_router.include_router(promotions.router, prefix="/v1/promotions", tags=["promotions"])
api_router.include_router(activity.router, prefix="/v1/activity", tags=["activity"])

# Agent runtime
api_router.include_router(actions.router, prefix="/v1/actions", tags=["actions"])

# Admin endpoints (sweeps, maintenance)
api_router.include_router(admin.router, prefix="/v1/admin", tags=["admin"])
