"""Promotion endpoints.

POST /v1/promotions                 - Create (ACTIVE if a slot is free, else QUEUED)
GET  /v1/promotions/active          - Featured promotions (<= 3, Redis-cached)
GET  /v1/promotions/queue           - Waiting promotions in FIFO order
POST /v1/promotions/{promoId}/cancel - Cancel (seller)
"""

from fastapi import APIRouter, Depends

from bazaar.routes.deps import get_agent_id
from bazaar.schemas import CreatePromotionRequest, PromotionOut
from bazaar.services import promotions
from bazaar.settings import get_settings
from bazaar.stores.redis import KEY_ACTIVE_PROMOTIONS, try_cache_get_json, try_cache_set_json

router = APIRouter()


@router.post("", response_model=PromotionOut, status_code=201)
async def create_promotion(body: CreatePromotionRequest, agent_id: str = Depends(get_agent_id)) -> PromotionOut:
    promo = await promotions.create_promotion(agent_id, body.listing_id, body.promo_price_minor)
    return PromotionOut.from_model(promo)


@router.get("/active", response_model=list[PromotionOut])
async def get_active_promotions() -> list[PromotionOut]:
    """Featured strip. Served from Redis when warm; never used for decisions."""
    cached = await try_cache_get_json(KEY_ACTIVE_PROMOTIONS)
    if cached is not None:
        return [PromotionOut.model_validate(item) for item in cached]

    items = [PromotionOut.from_model(p) for p in await promotions.get_active_promotions()]
    await try_cache_set_json(
        KEY_ACTIVE_PROMOTIONS,
        [p.model_dump(by_alias=True, mode="json") for p in items],
        get_settings().promotions_cache_ttl_seconds,
    )
    return items


@router.get("/queue", response_model=list[PromotionOut])
async def get_queue() -> list[PromotionOut]:
    return [PromotionOut.from_model(p) for p in await promotions.get_queue()]


@router.post("/{promo_id}/cancel", response_model=PromotionOut)
async def cancel_promotion(promo_id: str, agent_id: str = Depends(get_agent_id)) -> PromotionOut:
    return PromotionOut.from_model(await promotions.cancel_promotion(agent_id, promo_id))
