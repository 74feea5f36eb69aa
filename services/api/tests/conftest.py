"""Shared test fixtures.

Every test gets its own SQLite file database (aiosqlite). Transactions open
with BEGIN IMMEDIATE (see stores/postgres.py), so concurrent callers fired with
asyncio.gather serialize the way row locks serialize them on PostgreSQL.
Redis is never initialized: cache helpers degrade to misses.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from bazaar.services import catalog
from bazaar.settings import get_settings
from bazaar.stores.postgres import close_db, create_tables, drop_tables, init_db, new_id

QUESTION = "Does this come with the original packaging and a receipt?"
OFFER_MESSAGE = "Would you consider a lower price for a quick sale?"


@pytest.fixture(autouse=True)
async def _database(tmp_path, monkeypatch: pytest.MonkeyPatch):
    """Fresh schema per test."""
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'bazaar.db'}")
    get_settings.cache_clear()

    await init_db()
    await create_tables()
    yield
    await drop_tables()
    await close_db()
    get_settings.cache_clear()


@pytest.fixture
def seller_id() -> str:
    return new_id()


@pytest.fixture
def buyer_id() -> str:
    return new_id()


@pytest.fixture
async def store(seller_id: str):
    return await catalog.create_store(
        seller_id,
        "Test Store",
        return_policy_text="Returns within 30 days.",
        shipping_policy_text="Ships in 2 days.",
    )


@pytest.fixture
def make_listing(seller_id: str, store):
    """Factory: a new product + listing in the seller's store."""

    async def _make(price_minor: int = 4999, stock: int = 5):
        product = await catalog.create_product(seller_id, store.id, f"Product {new_id()[:8]}")
        return await catalog.create_listing(seller_id, store.id, product.id, price_minor, stock)

    return _make


@pytest.fixture
async def listing(make_listing):
    return await make_listing()


@pytest.fixture
async def client():
    """HTTP client against the app (lifespan not run; the database fixture owns setup)."""
    from bazaar.main import app

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
