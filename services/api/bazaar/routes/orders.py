"""Order endpoints.

POST /v1/orders/direct      - Buy a listing at its price
POST /v1/orders/from-offer  - Buy at an accepted offer's price
GET  /v1/orders/mine        - Caller's orders
GET  /v1/orders/{orderId}   - Order (buyer or seller only)

A purchase without interaction evidence is answered with 403 and the
blocked body: {success: false, blocked: true, error, requiredActions}.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from bazaar.routes.deps import get_agent_id
from bazaar.schemas import (
    BlockedResponse,
    ListingOut,
    OfferPurchaseRequest,
    OrderOut,
    PurchaseRequest,
    PurchaseResponse,
)
from bazaar.services import orders
from bazaar.services.orders import GatingRejection, PurchaseResult

router = APIRouter()

_BLOCKED = {403: {"model": BlockedResponse, "description": "Purchase gated on prior interaction"}}


def _purchase_response(result: PurchaseResult | GatingRejection) -> PurchaseResponse | JSONResponse:
    if isinstance(result, GatingRejection):
        return JSONResponse(status_code=403, content=result.to_dict())
    return PurchaseResponse(
        order=OrderOut.from_model(result.order),
        listing=ListingOut.from_model(result.listing),
    )


@router.post("/direct", response_model=PurchaseResponse, status_code=201, responses=_BLOCKED)
async def purchase_direct(body: PurchaseRequest, agent_id: str = Depends(get_agent_id)):
    result = await orders.purchase_direct(agent_id, body.listing_id, body.quantity)
    return _purchase_response(result)


@router.post("/from-offer", response_model=PurchaseResponse, status_code=201, responses=_BLOCKED)
async def purchase_from_offer(body: OfferPurchaseRequest, agent_id: str = Depends(get_agent_id)):
    result = await orders.purchase_from_offer(agent_id, body.offer_id, body.quantity)
    return _purchase_response(result)


@router.get("/mine", response_model=list[OrderOut])
async def list_my_orders(agent_id: str = Depends(get_agent_id)) -> list[OrderOut]:
    return [OrderOut.from_model(o) for o in await orders.list_for_buyer(agent_id)]


@router.get("/{order_id}", response_model=OrderOut)
async def get_order(order_id: str, agent_id: str = Depends(get_agent_id)) -> OrderOut:
    return OrderOut.from_model(await orders.get_order(order_id, agent_id))
