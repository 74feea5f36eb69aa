"""Offer endpoints.

POST /v1/offers                  - Make an offer (buyer)
GET  /v1/offers/mine             - Offers the caller made
GET  /v1/offers/{offerId}        - Offer with terms (buyer or seller only)
POST /v1/offers/{offerId}/accept - Accept (seller)
POST /v1/offers/{offerId}/reject - Reject (seller)
"""

from fastapi import APIRouter, Depends

from bazaar.routes.deps import get_agent_id
from bazaar.schemas import MakeOfferRequest, OfferOut
from bazaar.services import offers

router = APIRouter()


@router.post("", response_model=OfferOut, status_code=201)
async def make_offer(body: MakeOfferRequest, agent_id: str = Depends(get_agent_id)) -> OfferOut:
    offer = await offers.make_offer(agent_id, body.listing_id, body.price_minor, body.message)
    return OfferOut.from_model(offer)


@router.get("/mine", response_model=list[OfferOut])
async def list_my_offers(agent_id: str = Depends(get_agent_id)) -> list[OfferOut]:
    return [OfferOut.from_model(o) for o in await offers.list_for_buyer(agent_id)]


@router.get("/{offer_id}", response_model=OfferOut)
async def get_offer(offer_id: str, agent_id: str = Depends(get_agent_id)) -> OfferOut:
    return OfferOut.from_model(await offers.get_offer(offer_id, agent_id))


@router.post("/{offer_id}/accept", response_model=OfferOut)
async def accept_offer(offer_id: str, agent_id: str = Depends(get_agent_id)) -> OfferOut:
    return OfferOut.from_model(await offers.accept(agent_id, offer_id))


@router.post("/{offer_id}/reject", response_model=OfferOut)
async def reject_offer(offer_id: str, agent_id: str = Depends(get_agent_id)) -> OfferOut:
    return OfferOut.from_model(await offers.reject(agent_id, offer_id))
