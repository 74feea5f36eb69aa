"""Offer reference endpoints.

POST /v1/offer-references            - Point a thread at an offer (buyer or seller)
GET  /v1/offer-references?threadId= - References posted in a thread

References are public and never carry offer terms.
"""

from fastapi import APIRouter, Depends, Query

from bazaar.routes.deps import get_agent_id
from bazaar.schemas import CreateOfferReferenceRequest, OfferReferenceOut
from bazaar.services import offers

router = APIRouter()


@router.post("", response_model=OfferReferenceOut, status_code=201)
async def create_offer_reference(
    body: CreateOfferReferenceRequest,
    agent_id: str = Depends(get_agent_id),
) -> OfferReferenceOut:
    ref = await offers.create_offer_reference(agent_id, body.offer_id, body.thread_id, body.public_note)
    return OfferReferenceOut.from_model(ref)


@router.get("", response_model=list[OfferReferenceOut])
async def list_thread_references(
    thread_id: str = Query(alias="threadId"),
    limit: int = Query(default=50, ge=1, le=200),
) -> list[OfferReferenceOut]:
    return [OfferReferenceOut.from_model(r) for r in await offers.list_references_for_thread(thread_id, limit)]
