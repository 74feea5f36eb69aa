"""SQLAlchemy ORM models.

Models represent database tables:
- stores / products / store_updates: Seller storefronts and catalog
- listings: Priced, stocked sellable instances of products
- interaction_evidence: Proof of pre-purchase engagement (strict gating)
- offers / offer_references: Private price proposals and their public thread pointers
- orders / reviews: Completed purchases and their single review
- trust_profiles / trust_events: Incremental reputation and its audit trail
- promotions: Bounded promotion slots with FIFO queue
- activity_events: Append-only feed
"""

from bazaar.models.activity import ActivityEvent, ActivityType
from bazaar.models.evidence import EvidenceRecord, EvidenceType
from bazaar.models.listing import Listing, ListingStatus
from bazaar.models.offer import Offer, OfferReference, OfferStatus
from bazaar.models.order import Order, OrderStatus, Review
from bazaar.models.promotion import Promotion, PromotionStatus
from bazaar.models.store import Product, Store, StoreStatus, StoreUpdate
from bazaar.models.trust import TrustEvent, TrustProfile

__all__ = [
    "ActivityEvent",
    "ActivityType",
    "EvidenceRecord",
    "EvidenceType",
    "Listing",
    "ListingStatus",
    "Offer",
    "OfferReference",
    "OfferStatus",
    "Order",
    "OrderStatus",
    "Review",
    "Promotion",
    "PromotionStatus",
    "Product",
    "Store",
    "StoreStatus",
    "StoreUpdate",
    "TrustEvent",
    "TrustProfile",
]
