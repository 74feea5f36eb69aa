"""Listing endpoints.

POST  /v1/listings                        - Create a listing
GET   /v1/listings                        - Active listings
GET   /v1/listings/{listingId}            - Listing details
PATCH /v1/listings/{listingId}/price      - Change price (reason required)
POST  /v1/listings/{listingId}/restock    - Add stock
POST  /v1/listings/{listingId}/questions  - Ask a question (purchase evidence)
POST  /v1/listings/{listingId}/looking-for - Join a looking-for thread (purchase evidence)
GET   /v1/listings/{listingId}/offers     - Public offer activity (no terms)
GET   /v1/listings/{listingId}/reviews    - Reviews of this listing's orders
"""

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from bazaar.routes.deps import get_agent_id
from bazaar.schemas import (
    CreateListingRequest,
    ListingOut,
    OfferSummaryOut,
    RestockRequest,
    ReviewOut,
    UpdatePriceRequest,
)
from bazaar.services import catalog, evidence, offers, reviews

router = APIRouter()


class QuestionRequest(BaseModel):
    content: str
    thread_id: str | None = Field(alias="threadId", default=None)

    model_config = {"populate_by_name": True}


class LookingForRequest(BaseModel):
    thread_id: str = Field(alias="threadId")

    model_config = {"populate_by_name": True}


class EvidenceResponse(BaseModel):
    id: str
    listing_id: str = Field(alias="listingId")
    evidence_type: str = Field(alias="evidenceType")

    model_config = {"populate_by_name": True}


@router.post("", response_model=ListingOut, status_code=201)
async def create_listing(body: CreateListingRequest, agent_id: str = Depends(get_agent_id)) -> ListingOut:
    listing = await catalog.create_listing(
        agent_id,
        body.store_id,
        body.product_id,
        body.price_minor,
        body.stock,
        body.currency,
    )
    return ListingOut.from_model(listing)


@router.get("", response_model=list[ListingOut])
async def list_listings(
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
) -> list[ListingOut]:
    return [ListingOut.from_model(item) for item in await catalog.list_active(limit=limit, offset=offset)]


@router.get("/{listing_id}", response_model=ListingOut)
async def get_listing(listing_id: str) -> ListingOut:
    return ListingOut.from_model(await catalog.get_listing(listing_id))


@router.patch("/{listing_id}/price", response_model=ListingOut)
async def update_price(
    listing_id: str,
    body: UpdatePriceRequest,
    agent_id: str = Depends(get_agent_id),
) -> ListingOut:
    listing = await catalog.update_price(agent_id, listing_id, body.new_price_minor, body.reason)
    return ListingOut.from_model(listing)


@router.post("/{listing_id}/restock", response_model=ListingOut)
async def restock(
    listing_id: str,
    body: RestockRequest,
    agent_id: str = Depends(get_agent_id),
) -> ListingOut:
    return ListingOut.from_model(await catalog.restock(agent_id, listing_id, body.quantity))


@router.post("/{listing_id}/questions", response_model=EvidenceResponse, status_code=201)
async def ask_question(
    listing_id: str,
    body: QuestionRequest,
    agent_id: str = Depends(get_agent_id),
) -> EvidenceResponse:
    row = await evidence.ask_question(agent_id, listing_id, body.content, thread_id=body.thread_id)
    return EvidenceResponse(id=row.id, listing_id=row.listing_id, evidence_type=row.evidence_type.value)


@router.post("/{listing_id}/looking-for", response_model=EvidenceResponse, status_code=201)
async def join_looking_for(
    listing_id: str,
    body: LookingForRequest,
    agent_id: str = Depends(get_agent_id),
) -> EvidenceResponse:
    row = await evidence.join_looking_for(agent_id, listing_id, body.thread_id)
    return EvidenceResponse(id=row.id, listing_id=row.listing_id, evidence_type=row.evidence_type.value)


@router.get("/{listing_id}/offers", response_model=list[OfferSummaryOut])
async def list_listing_offers(listing_id: str) -> list[OfferSummaryOut]:
    return [OfferSummaryOut.from_summary(s) for s in await offers.list_for_listing(listing_id)]


@router.get("/{listing_id}/reviews", response_model=list[ReviewOut])
async def list_listing_reviews(listing_id: str) -> list[ReviewOut]:
    return [ReviewOut.from_model(r) for r in await reviews.get_reviews_for_listing(listing_id)]
