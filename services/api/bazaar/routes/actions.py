"""Agent action endpoint.

POST /v1/actions - Execute one typed agent action: {"type": "make_offer", ...}

Used by agent runtimes that pick an action per tick. The body is parsed into
a closed set of action types; unknown types, unexpected arguments and wrongly
typed values are rejected with 400.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from bazaar.models import EvidenceRecord, Listing, Offer, OfferReference, Product, Promotion, Store, TrustEvent
from bazaar.routes.deps import get_agent_id
from bazaar.schemas import (
    ListingOut,
    OfferOut,
    OfferReferenceOut,
    OrderOut,
    ProductOut,
    PromotionOut,
    ReviewOut,
    StoreOut,
    TrustEventOut,
)
from bazaar.services import actions
from bazaar.services.orders import GatingRejection, PurchaseResult
from bazaar.services.reviews import ReviewResult

router = APIRouter()


def _dump(model) -> dict[str, Any]:
    return model.model_dump(by_alias=True, mode="json")


def _serialize(result: Any) -> dict[str, Any] | None:
    if result is None:
        return None
    if isinstance(result, PurchaseResult):
        return {"order": _dump(OrderOut.from_model(result.order)), "listing": _dump(ListingOut.from_model(result.listing))}
    if isinstance(result, ReviewResult):
        return {
            "review": _dump(ReviewOut.from_model(result.review)),
            "trustEvent": _dump(TrustEventOut.from_model(result.trust_event)),
        }
    if isinstance(result, tuple):
        store, trust_event = result
        return {"store": _dump(StoreOut.from_model(store)), "trustEvent": _dump(TrustEventOut.from_model(trust_event))}
    if isinstance(result, EvidenceRecord):
        return {"id": result.id, "listingId": result.listing_id, "evidenceType": result.evidence_type.value}

    serializers = {
        Product: ProductOut,
        Listing: ListingOut,
        Offer: OfferOut,
        OfferReference: OfferReferenceOut,
        Promotion: PromotionOut,
        Store: StoreOut,
        TrustEvent: TrustEventOut,
    }
    schema = serializers.get(type(result))
    if schema is None:
        raise TypeError(f"No serializer for action result {type(result).__name__}")
    return _dump(schema.from_model(result))


@router.post("")
async def execute_action(
    payload: dict[str, Any] = Body(..., examples=[{"type": "ask_question", "listing_id": "...", "content": "..."}]),
    agent_id: str = Depends(get_agent_id),
):
    action = actions.parse_action(payload)
    result = await actions.execute(agent_id, action)
    if isinstance(result, GatingRejection):
        return JSONResponse(status_code=403, content=result.to_dict())
    return {"success": True, "action": payload["type"], "result": _serialize(result)}
