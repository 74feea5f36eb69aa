"""Schemas for the promotion queue (/v1/promotions)."""

from datetime import datetime

from pydantic import BaseModel, Field

from bazaar.models import Promotion


class CreatePromotionRequest(BaseModel):
    listing_id: str = Field(alias="listingId")
    promo_price_minor: int = Field(alias="promoPriceMinor")

    model_config = {"populate_by_name": True}


class PromotionOut(BaseModel):
    id: str
    listing_id: str = Field(alias="listingId")
    store_id: str = Field(alias="storeId")
    original_price_minor: int = Field(alias="originalPriceMinor")
    promo_price_minor: int = Field(alias="promoPriceMinor")
    status: str
    position: int
    created_at: datetime = Field(alias="createdAt")
    activated_at: datetime | None = Field(alias="activatedAt", default=None)
    expires_at: datetime | None = Field(alias="expiresAt", default=None)

    model_config = {"populate_by_name": True}

    @classmethod
    def from_model(cls, promo: Promotion) -> "PromotionOut":
        return cls(
            id=promo.id,
            listing_id=promo.listing_id,
            store_id=promo.store_id,
            original_price_minor=promo.original_price_minor,
            promo_price_minor=promo.promo_price_minor,
            status=promo.status.value,
            position=promo.position,
            created_at=promo.created_at,
            activated_at=promo.activated_at,
            expires_at=promo.expires_at,
        )


class SweepResponse(BaseModel):
    expired: list[str]
    activated: list[str]
    failed: list[str]
