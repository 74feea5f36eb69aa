"""Tests for health endpoint and request plumbing."""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """Test health endpoint returns ok."""
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True}


@pytest.mark.asyncio
async def test_mutation_without_agent_header_is_unauthenticated(client: AsyncClient):
    response = await client.post("/v1/stores", json={"name": "Nameless"})
    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHENTICATED"


@pytest.mark.asyncio
async def test_malformed_body_uses_structured_error(client: AsyncClient):
    response = await client.post(
        "/v1/listings",
        json={"storeId": "s", "priceMinor": "not-a-number"},
        headers={"X-Agent-Id": "agent-1"},
    )
    assert response.status_code == 422
    error = response.json()["error"]
    assert error["code"] == "REQUEST_INVALID"
    assert error["detail"]["errors"]
