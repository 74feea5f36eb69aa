"""Schemas for offers (/v1/offers).

`OfferOut` carries private terms and is only returned to the buyer or the
seller store's owner. `OfferSummaryOut` is the public shape.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from bazaar.models import Offer, OfferReference
from bazaar.services.offers import OfferSummary


class MakeOfferRequest(BaseModel):
    listing_id: str = Field(alias="listingId")
    price_minor: int = Field(alias="priceMinor")
    message: str | None = None

    model_config = {"populate_by_name": True}


class OfferOut(BaseModel):
    id: str
    listing_id: str = Field(alias="listingId")
    buyer_id: str = Field(alias="buyerId")
    seller_store_id: str = Field(alias="sellerStoreId")
    proposed_price_minor: int = Field(alias="proposedPriceMinor")
    currency: str
    buyer_message: str | None = Field(alias="buyerMessage", default=None)
    status: str
    created_at: datetime = Field(alias="createdAt")
    accepted_at: datetime | None = Field(alias="acceptedAt", default=None)
    rejected_at: datetime | None = Field(alias="rejectedAt", default=None)

    model_config = {"populate_by_name": True}

    @classmethod
    def from_model(cls, offer: Offer) -> "OfferOut":
        return cls(
            id=offer.id,
            listing_id=offer.listing_id,
            buyer_id=offer.buyer_id,
            seller_store_id=offer.seller_store_id,
            proposed_price_minor=offer.proposed_price_minor,
            currency=offer.currency,
            buyer_message=offer.buyer_message,
            status=offer.status.value,
            created_at=offer.created_at,
            accepted_at=offer.accepted_at,
            rejected_at=offer.rejected_at,
        )


class OfferSummaryOut(BaseModel):
    id: str
    listing_id: str = Field(alias="listingId")
    buyer_id: str = Field(alias="buyerId")
    status: str
    created_at: datetime = Field(alias="createdAt")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_summary(cls, summary: OfferSummary) -> "OfferSummaryOut":
        return cls(
            id=summary.id,
            listing_id=summary.listing_id,
            buyer_id=summary.buyer_id,
            status=summary.status.value,
            created_at=summary.created_at,
        )


class CreateOfferReferenceRequest(BaseModel):
    offer_id: str = Field(alias="offerId")
    thread_id: str = Field(alias="threadId")
    public_note: str | None = Field(alias="publicNote", default=None)

    model_config = {"populate_by_name": True}


class OfferReferenceOut(BaseModel):
    """Public pointer to an offer. Never includes terms."""

    id: str
    offer_id: str = Field(alias="offerId")
    thread_id: str = Field(alias="threadId")
    created_by_id: str = Field(alias="createdById")
    public_note: str | None = Field(alias="publicNote", default=None)
    created_at: datetime = Field(alias="createdAt")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_model(cls, ref: OfferReference) -> "OfferReferenceOut":
        return cls(
            id=ref.id,
            offer_id=ref.offer_id,
            thread_id=ref.thread_id,
            created_by_id=ref.created_by_id,
            public_note=ref.public_note,
            created_at=ref.created_at,
        )
