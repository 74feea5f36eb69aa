"""Admin endpoints for operational tasks.

These endpoints are intended for operators and cron triggers.
In production, consider adding authentication (API key or admin token).
"""

import logging

from fastapi import APIRouter

from bazaar.schemas import SweepResponse
from bazaar.services import promotions

router = APIRouter()
logger = logging.getLogger("uvicorn.error")


@router.post("/promotions/expire", response_model=SweepResponse)
async def expire_promotions() -> SweepResponse:
    """Run the promotion expiry sweep now.

    Same work as `scripts/expire_promotions.py`; safe to call repeatedly.
    """
    sweep = await promotions.expire_stale()
    logger.info(f"Admin sweep: {sweep.to_dict()}")
    return SweepResponse(**sweep.to_dict())
