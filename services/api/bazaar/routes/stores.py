"""Store endpoints.

POST  /v1/stores                     - Create a store (caller becomes owner)
GET   /v1/stores                     - List stores
GET   /v1/stores/{storeId}           - Store details
PATCH /v1/stores/{storeId}/policies  - Update return/shipping policies
POST  /v1/stores/{storeId}/products  - Create (or reuse) a product
GET   /v1/stores/{storeId}/offers    - Offers received (owner only)
GET   /v1/stores/{storeId}/promotion - The store's featured (ACTIVE) promotion
"""

from fastapi import APIRouter, Depends, Query

from bazaar.models import OfferStatus
from bazaar.routes.deps import get_agent_id
from bazaar.schemas import (
    CreateProductRequest,
    CreateStoreRequest,
    OfferOut,
    ProductOut,
    PromotionOut,
    StoreOut,
    TrustEventOut,
    UpdatePoliciesRequest,
)
from bazaar.services import catalog, offers, promotions

router = APIRouter()


@router.post("", response_model=StoreOut, status_code=201)
async def create_store(body: CreateStoreRequest, agent_id: str = Depends(get_agent_id)) -> StoreOut:
    store = await catalog.create_store(
        agent_id,
        body.name,
        tagline=body.tagline,
        brand_voice=body.brand_voice,
        return_policy_text=body.return_policy_text,
        shipping_policy_text=body.shipping_policy_text,
    )
    return StoreOut.from_model(store)


@router.get("", response_model=list[StoreOut])
async def list_stores(
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
) -> list[StoreOut]:
    return [StoreOut.from_model(s) for s in await catalog.list_stores(limit=limit, offset=offset)]


@router.get("/{store_id}", response_model=StoreOut)
async def get_store(store_id: str) -> StoreOut:
    return StoreOut.from_model(await catalog.get_store(store_id))


@router.patch("/{store_id}/policies")
async def update_policies(
    store_id: str,
    body: UpdatePoliciesRequest,
    agent_id: str = Depends(get_agent_id),
) -> dict:
    """Update policies; credits policy clarity on the store's trust profile."""
    store, trust_event = await catalog.update_policies(
        agent_id,
        store_id,
        reason=body.reason,
        return_policy_text=body.return_policy_text,
        shipping_policy_text=body.shipping_policy_text,
    )
    return {
        "store": StoreOut.from_model(store).model_dump(by_alias=True, mode="json"),
        "trustEvent": TrustEventOut.from_model(trust_event).model_dump(by_alias=True, mode="json"),
    }


@router.post("/{store_id}/products", response_model=ProductOut, status_code=201)
async def create_product(
    store_id: str,
    body: CreateProductRequest,
    agent_id: str = Depends(get_agent_id),
) -> ProductOut:
    product = await catalog.create_product(agent_id, store_id, body.title, body.description)
    return ProductOut.from_model(product)


@router.get("/{store_id}/offers", response_model=list[OfferOut])
async def list_store_offers(
    store_id: str,
    status: OfferStatus | None = Query(default=None),
    agent_id: str = Depends(get_agent_id),
) -> list[OfferOut]:
    return [OfferOut.from_model(o) for o in await offers.list_for_store(agent_id, store_id, status)]


@router.get("/{store_id}/promotion", response_model=PromotionOut | None)
async def get_store_promotion(store_id: str) -> PromotionOut | None:
    promo = await promotions.get_store_promotion(store_id)
    return PromotionOut.from_model(promo) if promo else None
