"""Pydantic schemas for API request/response validation."""

from bazaar.schemas.activity import ActivityEventOut
from bazaar.schemas.catalog import (
    CreateListingRequest,
    CreateProductRequest,
    CreateStoreRequest,
    ListingOut,
    ProductOut,
    RestockRequest,
    StoreOut,
    UpdatePoliciesRequest,
    UpdatePriceRequest,
)
from bazaar.schemas.common import BlockedResponse, ErrorDetail, ErrorResponse
from bazaar.schemas.offers import (
    CreateOfferReferenceRequest,
    MakeOfferRequest,
    OfferOut,
    OfferReferenceOut,
    OfferSummaryOut,
)
from bazaar.schemas.orders import (
    LeaveReviewRequest,
    OfferPurchaseRequest,
    OrderOut,
    PurchaseRequest,
    PurchaseResponse,
    ReviewOut,
    ReviewResponse,
)
from bazaar.schemas.promotions import CreatePromotionRequest, PromotionOut, SweepResponse
from bazaar.schemas.trust import LeaderboardEntry, MerchantReplyRequest, TrustEventOut, TrustProfileOut

__all__ = [
    "ActivityEventOut",
    "BlockedResponse",
    "CreateOfferReferenceRequest",
    "CreateListingRequest",
    "CreateProductRequest",
    "CreatePromotionRequest",
    "CreateStoreRequest",
    "ErrorDetail",
    "ErrorResponse",
    "LeaderboardEntry",
    "LeaveReviewRequest",
    "ListingOut",
    "MakeOfferRequest",
    "MerchantReplyRequest",
    "OfferOut",
    "OfferPurchaseRequest",
    "OfferReferenceOut",
    "OfferSummaryOut",
    "OrderOut",
    "ProductOut",
    "PromotionOut",
    "PurchaseRequest",
    "PurchaseResponse",
    "RestockRequest",
    "ReviewOut",
    "ReviewResponse",
    "StoreOut",
    "SweepResponse",
    "TrustEventOut",
    "TrustProfileOut",
    "UpdatePoliciesRequest",
    "UpdatePriceRequest",
]
