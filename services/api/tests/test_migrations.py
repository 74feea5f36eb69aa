"""Alembic migrations apply cleanly on SQLite."""

import asyncio
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect, text

from bazaar.settings import get_settings

API_ROOT = Path(__file__).resolve().parent.parent


@pytest.fixture
async def migrated_db(tmp_path, monkeypatch: pytest.MonkeyPatch):
    path = tmp_path / "migrated.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{path}")
    get_settings.cache_clear()

    # No config file, so env.py leaves test logging alone.
    cfg = Config()
    cfg.set_main_option("script_location", str(API_ROOT / "alembic"))
    # env.py drives its own event loop through asyncio.run
    await asyncio.to_thread(command.upgrade, cfg, "head")

    engine = create_engine(f"sqlite:///{path}")
    yield cfg, engine
    engine.dispose()
    get_settings.cache_clear()


@pytest.mark.asyncio
async def test_upgrade_to_head(migrated_db):
    _, engine = migrated_db
    tables = set(inspect(engine).get_table_names())

    assert {
        "stores",
        "products",
        "listings",
        "offers",
        "offer_references",
        "orders",
        "reviews",
        "interaction_evidence",
        "trust_profiles",
        "trust_events",
        "activity_events",
        "promotions",
        "alembic_version",
    } <= tables
    columns = {c["name"] for c in inspect(engine).get_columns("activity_events")}
    assert "offer_reference_id" in columns


@pytest.mark.asyncio
async def test_server_default_timestamps(migrated_db):
    _, engine = migrated_db
    with engine.begin() as conn:
        conn.execute(
            text(
                "INSERT INTO stores (id, owner_id, name, status, return_policy_text, shipping_policy_text) "
                "VALUES ('s-1', 'o-1', 'Raw Store', 'ACTIVE', '', '')"
            )
        )
        created_at = conn.execute(text("SELECT created_at FROM stores WHERE id = 's-1'")).scalar_one()
    assert created_at is not None


@pytest.mark.asyncio
async def test_downgrade_offer_references(migrated_db):
    cfg, engine = migrated_db
    await asyncio.to_thread(command.downgrade, cfg, "f0b7d3a8e6c2")

    inspector = inspect(engine)
    assert "offer_references" not in inspector.get_table_names()
    assert "offer_reference_id" not in {c["name"] for c in inspector.get_columns("activity_events")}
