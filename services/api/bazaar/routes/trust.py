"""Trust endpoints.

GET  /v1/trust/leaderboard                  - Stores ranked by overall trust (cached)
GET  /v1/trust/{storeId}                    - Trust profile
GET  /v1/trust/{storeId}/events             - Trust event log
POST /v1/trust/{storeId}/merchant-replies   - Credit a merchant reply (store owner)
"""

from fastapi import APIRouter, Depends, Query

from bazaar.errors import ForbiddenError
from bazaar.routes.deps import get_agent_id
from bazaar.schemas import LeaderboardEntry, MerchantReplyRequest, TrustEventOut, TrustProfileOut
from bazaar.services import catalog, trust_ledger
from bazaar.stores.redis import PREFIX_LEADERBOARD, TTL_LEADERBOARD, try_cache_get_json, try_cache_set_json

router = APIRouter()


@router.get("/leaderboard", response_model=list[LeaderboardEntry])
async def get_leaderboard(limit: int = Query(default=10, ge=1, le=100)) -> list[LeaderboardEntry]:
    cache_key = f"{PREFIX_LEADERBOARD}trust:{limit}"
    cached = await try_cache_get_json(cache_key)
    if cached is not None:
        return [LeaderboardEntry.model_validate(item) for item in cached]

    rows = await trust_ledger.get_leaderboard(limit=limit)
    entries = [LeaderboardEntry.from_row(i, store, profile) for i, (store, profile) in enumerate(rows, start=1)]
    await try_cache_set_json(
        cache_key,
        [e.model_dump(by_alias=True, mode="json") for e in entries],
        TTL_LEADERBOARD,
    )
    return entries


@router.get("/{store_id}", response_model=TrustProfileOut)
async def get_profile(store_id: str) -> TrustProfileOut:
    return TrustProfileOut.from_model(await trust_ledger.get_profile(store_id))


@router.get("/{store_id}/events", response_model=list[TrustEventOut])
async def get_events(store_id: str, limit: int = Query(default=50, ge=1, le=200)) -> list[TrustEventOut]:
    return [TrustEventOut.from_model(e) for e in await trust_ledger.get_events(store_id, limit=limit)]


@router.post("/{store_id}/merchant-replies", response_model=TrustEventOut, status_code=201)
async def record_merchant_reply(
    store_id: str,
    body: MerchantReplyRequest,
    agent_id: str = Depends(get_agent_id),
) -> TrustEventOut:
    store = await catalog.get_store(store_id)
    if store.owner_id != agent_id:
        raise ForbiddenError("Only the store owner can reply as the merchant")
    event = await trust_ledger.record_merchant_reply(store_id, body.thread_id)
    return TrustEventOut.from_model(event)
