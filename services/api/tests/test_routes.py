"""HTTP surface: status codes, camelCase bodies and the error envelope."""

import pytest
from httpx import AsyncClient

from bazaar.stores.postgres import new_id
from conftest import OFFER_MESSAGE, QUESTION


def _as(agent_id: str) -> dict[str, str]:
    return {"X-Agent-Id": agent_id}


async def _create_listing(client: AsyncClient, seller_id: str, price_minor: int = 4999, stock: int = 2) -> dict:
    store = (await client.post("/v1/stores", json={"name": "Route Store"}, headers=_as(seller_id))).json()
    product = (
        await client.post(f"/v1/stores/{store['id']}/products", json={"title": "Kettle"}, headers=_as(seller_id))
    ).json()
    response = await client.post(
        "/v1/listings",
        json={"storeId": store["id"], "productId": product["id"], "priceMinor": price_minor, "stock": stock},
        headers=_as(seller_id),
    )
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_create_store_and_listing(client: AsyncClient, seller_id: str):
    listing = await _create_listing(client, seller_id)

    assert listing["priceMinor"] == 4999
    assert listing["stockOnHand"] == 2
    assert listing["status"] == "ACTIVE"

    response = await client.get(f"/v1/listings/{listing['id']}")
    assert response.status_code == 200
    assert response.json()["id"] == listing["id"]


@pytest.mark.asyncio
async def test_unknown_listing_is_404(client: AsyncClient):
    response = await client.get("/v1/listings/does-not-exist")
    assert response.status_code == 404
    error = response.json()["error"]
    assert error["code"] == "NOT_FOUND"
    assert error["message"]


@pytest.mark.asyncio
async def test_blocked_purchase_body(client: AsyncClient, seller_id: str, buyer_id: str):
    listing = await _create_listing(client, seller_id)

    response = await client.post("/v1/orders/direct", json={"listingId": listing["id"]}, headers=_as(buyer_id))

    assert response.status_code == 403
    assert response.json() == {
        "success": False,
        "blocked": True,
        "error": "Ask a question, make an offer, or participate in a looking-for thread first",
        "requiredActions": ["ask_question", "make_offer", "participate_looking_for"],
    }


@pytest.mark.asyncio
async def test_question_then_purchase_then_review(client: AsyncClient, seller_id: str, buyer_id: str):
    listing = await _create_listing(client, seller_id)

    response = await client.post(
        f"/v1/listings/{listing['id']}/questions",
        json={"content": QUESTION},
        headers=_as(buyer_id),
    )
    assert response.status_code == 201
    assert response.json()["evidenceType"] == "QUESTION_POSTED"

    response = await client.post("/v1/orders/direct", json={"listingId": listing["id"]}, headers=_as(buyer_id))
    assert response.status_code == 201
    body = response.json()
    assert body["order"]["unitPriceMinor"] == 4999
    assert body["order"]["status"] == "DELIVERED"
    assert body["listing"]["stockOnHand"] == 1

    response = await client.post(
        "/v1/reviews",
        json={"orderId": body["order"]["id"], "rating": 5, "body": "Boils fast, looks great."},
        headers=_as(buyer_id),
    )
    assert response.status_code == 201
    trust_event = response.json()["trustEvent"]
    assert trust_event["reason"] == "REVIEW_POSTED"

    response = await client.get(f"/v1/trust/{listing['storeId']}")
    assert response.json()["overallScore"] == 55.0


@pytest.mark.asyncio
async def test_offer_flow_and_privacy(client: AsyncClient, seller_id: str, buyer_id: str):
    listing = await _create_listing(client, seller_id)

    response = await client.post(
        "/v1/offers",
        json={"listingId": listing["id"], "priceMinor": 2000, "message": OFFER_MESSAGE},
        headers=_as(buyer_id),
    )
    assert response.status_code == 201
    offer = response.json()

    # Public view of the listing's offers carries no terms
    public = (await client.get(f"/v1/listings/{listing['id']}/offers")).json()
    assert len(public) == 1
    assert "proposedPriceMinor" not in public[0]
    assert "buyerMessage" not in public[0]

    response = await client.get(f"/v1/offers/{offer['id']}", headers=_as(new_id()))
    assert response.status_code == 403

    response = await client.post(f"/v1/offers/{offer['id']}/accept", headers=_as(seller_id))
    assert response.json()["status"] == "ACCEPTED"
    response = await client.post(f"/v1/offers/{offer['id']}/reject", headers=_as(seller_id))
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "CONFLICT"

    response = await client.post("/v1/orders/from-offer", json={"offerId": offer["id"]}, headers=_as(buyer_id))
    assert response.status_code == 201
    assert response.json()["order"]["unitPriceMinor"] == 2000


@pytest.mark.asyncio
async def test_sold_out_is_conflict(client: AsyncClient, seller_id: str, buyer_id: str):
    listing = await _create_listing(client, seller_id, stock=1)
    await client.post(f"/v1/listings/{listing['id']}/questions", json={"content": QUESTION}, headers=_as(buyer_id))

    first = await client.post("/v1/orders/direct", json={"listingId": listing["id"]}, headers=_as(buyer_id))
    second = await client.post("/v1/orders/direct", json={"listingId": listing["id"]}, headers=_as(buyer_id))

    assert first.status_code == 201
    assert first.json()["listing"]["status"] == "SOLD_OUT"
    assert second.status_code == 409


@pytest.mark.asyncio
async def test_promotions_endpoints(client: AsyncClient, seller_id: str):
    listing = await _create_listing(client, seller_id)

    response = await client.post(
        "/v1/promotions",
        json={"listingId": listing["id"], "promoPriceMinor": 3999},
        headers=_as(seller_id),
    )
    assert response.status_code == 201
    promo = response.json()
    assert promo["status"] == "ACTIVE"

    active = (await client.get("/v1/promotions/active")).json()
    assert [p["id"] for p in active] == [promo["id"]]

    response = await client.post(f"/v1/promotions/{promo['id']}/cancel", headers=_as(seller_id))
    assert response.json()["status"] == "CANCELLED"

    response = await client.post("/v1/admin/promotions/expire")
    assert response.status_code == 200
    assert response.json()["expired"] == []


@pytest.mark.asyncio
async def test_activity_feed_filters(client: AsyncClient, seller_id: str):
    listing = await _create_listing(client, seller_id)

    response = await client.get("/v1/activity", params={"listingId": listing["id"]})
    assert response.status_code == 200
    assert [e["type"] for e in response.json()] == ["LISTING_DROPPED"]

    response = await client.get("/v1/activity", params={"type": "STORE_CREATED"})
    assert len(response.json()) == 1


@pytest.mark.asyncio
async def test_actions_endpoint(client: AsyncClient, seller_id: str, buyer_id: str):
    listing = await _create_listing(client, seller_id)

    response = await client.post(
        "/v1/actions",
        json={"type": "purchase_direct", "listing_id": listing["id"]},
        headers=_as(buyer_id),
    )
    assert response.status_code == 403
    assert response.json()["blocked"] is True

    response = await client.post(
        "/v1/actions",
        json={"type": "ask_question", "listing_id": listing["id"], "content": QUESTION},
        headers=_as(buyer_id),
    )
    assert response.status_code == 200
    assert response.json()["result"]["evidenceType"] == "QUESTION_POSTED"

    response = await client.post("/v1/actions", json={"type": "fly"}, headers=_as(buyer_id))
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_action_with_wrongly_typed_argument_is_400(client: AsyncClient, seller_id: str, buyer_id: str):
    listing = await _create_listing(client, seller_id)

    response = await client.post(
        "/v1/actions",
        json={"type": "make_offer", "listing_id": listing["id"], "price_minor": "a lot"},
        headers=_as(buyer_id),
    )

    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["detail"]["errors"][0]["loc"] == "make_offer.price_minor"

    response = await client.get(f"/v1/listings/{listing['id']}/offers")
    assert response.json() == []


@pytest.mark.asyncio
async def test_offer_reference_endpoints(client: AsyncClient, seller_id: str, buyer_id: str):
    listing = await _create_listing(client, seller_id)
    offer = (
        await client.post(
            "/v1/offers",
            json={"listingId": listing["id"], "priceMinor": 2000, "message": OFFER_MESSAGE},
            headers=_as(buyer_id),
        )
    ).json()

    response = await client.post(
        "/v1/offer-references",
        json={"offerId": offer["id"], "threadId": "thread-9", "publicNote": "Sent an offer"},
        headers=_as(buyer_id),
    )
    assert response.status_code == 201
    ref = response.json()
    assert ref["offerId"] == offer["id"]
    assert ref["publicNote"] == "Sent an offer"
    assert "proposedPriceMinor" not in ref

    response = await client.post(
        "/v1/offer-references",
        json={"offerId": offer["id"], "threadId": "thread-9"},
        headers=_as(new_id()),
    )
    assert response.status_code == 403

    listed = (await client.get("/v1/offer-references", params={"threadId": "thread-9"})).json()
    assert [r["id"] for r in listed] == [ref["id"]]

    response = await client.post(
        "/v1/actions",
        json={"type": "create_offer_reference", "offer_id": offer["id"], "thread_id": "thread-9"},
        headers=_as(seller_id),
    )
    assert response.status_code == 200
    assert response.json()["result"]["offerId"] == offer["id"]
