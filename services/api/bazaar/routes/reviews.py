"""Review endpoints.

POST /v1/reviews - Review a delivered order (one per order)
"""

from fastapi import APIRouter, Depends

from bazaar.routes.deps import get_agent_id
from bazaar.schemas import LeaveReviewRequest, ReviewOut, ReviewResponse, TrustEventOut
from bazaar.services import reviews

router = APIRouter()


@router.post("", response_model=ReviewResponse, status_code=201)
async def leave_review(body: LeaveReviewRequest, agent_id: str = Depends(get_agent_id)) -> ReviewResponse:
    result = await reviews.leave_review(agent_id, body.order_id, body.rating, body.title, body.body)
    return ReviewResponse(
        review=ReviewOut.from_model(result.review),
        trust_event=TrustEventOut.from_model(result.trust_event),
    )
