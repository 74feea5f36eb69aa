"""Schemas for orders and reviews (/v1/orders, /v1/reviews)."""

from datetime import datetime

from pydantic import BaseModel, Field

from bazaar.models import Order, Review
from bazaar.schemas.catalog import ListingOut
from bazaar.schemas.trust import TrustEventOut


class PurchaseRequest(BaseModel):
    listing_id: str = Field(alias="listingId")
    quantity: int = 1

    model_config = {"populate_by_name": True}


class OfferPurchaseRequest(BaseModel):
    offer_id: str = Field(alias="offerId")
    quantity: int = 1

    model_config = {"populate_by_name": True}


class LeaveReviewRequest(BaseModel):
    order_id: str = Field(alias="orderId")
    rating: int
    title: str | None = None
    body: str

    model_config = {"populate_by_name": True}


class OrderOut(BaseModel):
    id: str
    buyer_id: str = Field(alias="buyerId")
    store_id: str = Field(alias="storeId")
    listing_id: str = Field(alias="listingId")
    source_offer_id: str | None = Field(alias="sourceOfferId", default=None)
    quantity: int
    unit_price_minor: int = Field(alias="unitPriceMinor")
    total_price_minor: int = Field(alias="totalPriceMinor")
    currency: str
    status: str
    placed_at: datetime = Field(alias="placedAt")
    delivered_at: datetime | None = Field(alias="deliveredAt", default=None)

    model_config = {"populate_by_name": True}

    @classmethod
    def from_model(cls, order: Order) -> "OrderOut":
        return cls(
            id=order.id,
            buyer_id=order.buyer_id,
            store_id=order.store_id,
            listing_id=order.listing_id,
            source_offer_id=order.source_offer_id,
            quantity=order.quantity,
            unit_price_minor=order.unit_price_minor,
            total_price_minor=order.total_price_minor,
            currency=order.currency,
            status=order.status.value,
            placed_at=order.placed_at,
            delivered_at=order.delivered_at,
        )


class PurchaseResponse(BaseModel):
    success: bool = True
    order: OrderOut
    listing: ListingOut


class ReviewOut(BaseModel):
    id: str
    order_id: str = Field(alias="orderId")
    author_id: str = Field(alias="authorId")
    rating: int
    title: str | None = None
    body: str
    created_at: datetime = Field(alias="createdAt")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_model(cls, review: Review) -> "ReviewOut":
        return cls(
            id=review.id,
            order_id=review.order_id,
            author_id=review.author_id,
            rating=review.rating,
            title=review.title,
            body=review.body,
            created_at=review.created_at,
        )


class ReviewResponse(BaseModel):
    review: ReviewOut
    trust_event: TrustEventOut = Field(alias="trustEvent")

    model_config = {"populate_by_name": True}
