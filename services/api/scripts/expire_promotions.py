#!/usr/bin/env python3
"""Promotion expiry sweep for Railway Cron.

Schedule:
- Run every few minutes in Railway Cron Jobs (e.g. */5 * * * *).

Behavior:
- Expires ACTIVE promotions whose expires_at has passed.
- Promotes the oldest QUEUED promotions into the freed slots.
- Rows that fail to expire are logged and retried on the next run.

Run (local / Railway):
  cd services/api
  python -m scripts.expire_promotions
"""

import asyncio
import os
import sys


# Ensure imports work when executed as a script/module
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bazaar.services.promotions import expire_stale  # noqa: E402
from bazaar.stores.postgres import close_db, init_db, ping_db  # noqa: E402
from bazaar.stores.redis import close_redis, init_redis  # noqa: E402


async def main() -> None:
    # Initialize shared connections (same as API lifespan, but for a one-off cron run)
    await init_db()
    await ping_db()
    try:
        await init_redis()
    except Exception:
        # Redis only backs the featured-promotions cache; the sweep itself does not need it.
        pass

    try:
        sweep = await expire_stale()
        # Final output for Railway logs
        print({"ok": not sweep.failed, **sweep.to_dict()})
    finally:
        await close_redis()
        await close_db()


if __name__ == "__main__":
    asyncio.run(main())
