"""Activity feed endpoint.

GET /v1/activity - Recent events, optionally filtered by store, listing or type.
"""

from fastapi import APIRouter, Query

from bazaar.models import ActivityType
from bazaar.schemas import ActivityEventOut
from bazaar.services import activity

router = APIRouter()


@router.get("", response_model=list[ActivityEventOut])
async def get_recent(
    limit: int = Query(default=50, ge=1, le=200),
    store_id: str | None = Query(default=None, alias="storeId"),
    listing_id: str | None = Query(default=None, alias="listingId"),
    event_type: ActivityType | None = Query(default=None, alias="type"),
) -> list[ActivityEventOut]:
    events = await activity.get_recent(
        limit,
        store_id=store_id,
        listing_id=listing_id,
        event_type=event_type,
    )
    return [ActivityEventOut.from_model(e) for e in events]
