"""Schemas for stores, products and listings (/v1/stores, /v1/listings)."""

from datetime import datetime

from pydantic import BaseModel, Field

from bazaar.models import Listing, Product, Store


class CreateStoreRequest(BaseModel):
    name: str
    tagline: str | None = None
    brand_voice: str | None = Field(alias="brandVoice", default=None)
    return_policy_text: str = Field(alias="returnPolicyText", default="")
    shipping_policy_text: str = Field(alias="shippingPolicyText", default="")

    model_config = {"populate_by_name": True}


class UpdatePoliciesRequest(BaseModel):
    reason: str
    return_policy_text: str | None = Field(alias="returnPolicyText", default=None)
    shipping_policy_text: str | None = Field(alias="shippingPolicyText", default=None)

    model_config = {"populate_by_name": True}


class CreateProductRequest(BaseModel):
    title: str
    description: str = ""


class CreateListingRequest(BaseModel):
    store_id: str = Field(alias="storeId")
    product_id: str = Field(alias="productId")
    price_minor: int = Field(alias="priceMinor")
    stock: int
    currency: str = Field(default="USD", min_length=3, max_length=3)

    model_config = {"populate_by_name": True}


class UpdatePriceRequest(BaseModel):
    new_price_minor: int = Field(alias="newPriceMinor")
    reason: str

    model_config = {"populate_by_name": True}


class RestockRequest(BaseModel):
    quantity: int


class StoreOut(BaseModel):
    """A store as shown to any agent."""

    id: str
    owner_id: str = Field(alias="ownerId")
    name: str
    tagline: str | None = None
    brand_voice: str | None = Field(alias="brandVoice", default=None)
    return_policy_text: str = Field(alias="returnPolicyText")
    shipping_policy_text: str = Field(alias="shippingPolicyText")
    status: str
    created_at: datetime = Field(alias="createdAt")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_model(cls, store: Store) -> "StoreOut":
        return cls(
            id=store.id,
            owner_id=store.owner_id,
            name=store.name,
            tagline=store.tagline,
            brand_voice=store.brand_voice,
            return_policy_text=store.return_policy_text,
            shipping_policy_text=store.shipping_policy_text,
            status=store.status.value,
            created_at=store.created_at,
        )


class ProductOut(BaseModel):
    id: str
    store_id: str = Field(alias="storeId")
    title: str
    description: str

    model_config = {"populate_by_name": True}

    @classmethod
    def from_model(cls, product: Product) -> "ProductOut":
        return cls(
            id=product.id,
            store_id=product.store_id,
            title=product.title,
            description=product.description,
        )


class ListingOut(BaseModel):
    id: str
    store_id: str = Field(alias="storeId")
    product_id: str = Field(alias="productId")
    price_minor: int = Field(alias="priceMinor")
    currency: str
    stock_on_hand: int = Field(alias="stockOnHand")
    status: str
    created_at: datetime = Field(alias="createdAt")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_model(cls, listing: Listing) -> "ListingOut":
        return cls(
            id=listing.id,
            store_id=listing.store_id,
            product_id=listing.product_id,
            price_minor=listing.price_minor,
            currency=listing.currency,
            stock_on_hand=listing.stock_on_hand,
            status=listing.status.value,
            created_at=listing.created_at,
        )
