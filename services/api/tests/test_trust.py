"""Trust deltas: pure calculation and the persisted ledger."""

import pytest
from sqlalchemy import select

from bazaar.errors import NotFoundError
from bazaar.models import TrustEvent
from bazaar.services import trust_ledger
from bazaar.services.trust import (
    SCORE_MAX,
    SCORE_MIN,
    TrustDeltas,
    TrustReason,
    apply_deltas,
    fixed_deltas,
    normalize_rating,
    review_deltas,
)
from bazaar.stores.postgres import get_session


def _scores(value: float = 50.0) -> dict[str, float]:
    return {
        "overall": value,
        "product_satisfaction": value,
        "claim_accuracy": value,
        "support_responsiveness": value,
        "policy_clarity": value,
    }


@pytest.mark.parametrize(
    ("rating", "expected"),
    [(1, -1.0), (2, -0.5), (3, 0.0), (4, 0.5), (5, 1.0)],
)
def test_normalize_rating(rating: int, expected: float) -> None:
    assert normalize_rating(rating) == expected


@pytest.mark.parametrize("rating", [0, 6, -3])
def test_normalize_rating_rejects_out_of_range(rating: int) -> None:
    with pytest.raises(ValueError):
        normalize_rating(rating)


def test_review_deltas_scale_overall_and_product_satisfaction() -> None:
    best = review_deltas(5)
    assert best.overall == 5.0
    assert best.product_satisfaction == 8.0
    assert best.support_responsiveness == 0.0

    worst = review_deltas(1)
    assert worst.overall == -5.0
    assert worst.product_satisfaction == -8.0

    assert review_deltas(3) == TrustDeltas()


def test_fixed_deltas() -> None:
    reply = fixed_deltas(TrustReason.MERCHANT_REPLIED_IN_THREAD)
    assert reply.overall == 1.0
    assert reply.support_responsiveness == 3.0

    policy = fixed_deltas(TrustReason.POLICY_UPDATED)
    assert policy.overall == 0.5
    assert policy.policy_clarity == 2.0

    with pytest.raises(ValueError):
        fixed_deltas(TrustReason.REVIEW_POSTED)


def test_every_reason_has_a_delta_source() -> None:
    # Reviews carry rating-weighted deltas; every other reason is fixed.
    for reason in TrustReason:
        if reason is TrustReason.REVIEW_POSTED:
            continue
        assert fixed_deltas(reason) != TrustDeltas()
    assert {r.value for r in TrustReason} == {"REVIEW_POSTED", "MERCHANT_REPLIED_IN_THREAD", "POLICY_UPDATED"}


def test_apply_deltas_clamps_each_dimension() -> None:
    scores, clamped = apply_deltas(_scores(98.0), TrustDeltas(overall=5.0, policy_clarity=-1.0))
    assert scores["overall"] == SCORE_MAX
    assert scores["policy_clarity"] == 97.0
    assert clamped == ["overall"]

    scores, clamped = apply_deltas(_scores(2.0), TrustDeltas(product_satisfaction=-8.0))
    assert scores["product_satisfaction"] == SCORE_MIN
    assert clamped == ["product_satisfaction"]


@pytest.mark.asyncio
async def test_store_starts_with_default_profile(store) -> None:
    profile = await trust_ledger.get_profile(store.id)
    assert profile.overall_score == 50.0
    assert profile.policy_clarity_score == 50.0


@pytest.mark.asyncio
async def test_repeated_negative_deltas_never_go_below_zero(store) -> None:
    for _ in range(5):
        await trust_ledger.apply_delta(store.id, TrustReason.REVIEW_POSTED, TrustDeltas(overall=-30.0))

    profile = await trust_ledger.get_profile(store.id)
    assert profile.overall_score == 0.0

    events = await trust_ledger.get_events(store.id)
    assert len(events) == 5
    # Newest first: every application from the second on hit the floor.
    assert events[0].meta["clamped"] == ["overall"]
    assert "clamped" not in events[-1].meta


@pytest.mark.asyncio
async def test_repeated_positive_deltas_never_exceed_hundred(store) -> None:
    for _ in range(30):
        await trust_ledger.record_merchant_reply(store.id, thread_id="thread-1")

    profile = await trust_ledger.get_profile(store.id)
    assert profile.support_responsiveness_score == 100.0
    assert profile.overall_score == 80.0


@pytest.mark.asyncio
async def test_each_delta_appends_one_event(store) -> None:
    event = await trust_ledger.record_merchant_reply(store.id, thread_id="thread-42")
    assert event.reason == TrustReason.MERCHANT_REPLIED_IN_THREAD
    assert event.linked_thread_id == "thread-42"

    async with get_session() as session:
        rows = (await session.execute(select(TrustEvent).where(TrustEvent.store_id == store.id))).scalars().all()
    assert len(rows) == 1


@pytest.mark.asyncio
async def test_apply_delta_unknown_store() -> None:
    with pytest.raises(NotFoundError):
        await trust_ledger.apply_delta("missing", TrustReason.POLICY_UPDATED, TrustDeltas(overall=1.0))


@pytest.mark.asyncio
async def test_leaderboard_orders_by_overall(seller_id: str, store) -> None:
    from bazaar.services import catalog

    other = await catalog.create_store(seller_id, "Second Store")
    await trust_ledger.record_merchant_reply(other.id)

    board = await trust_ledger.get_leaderboard()
    assert [s.id for s, _ in board] == [other.id, store.id]
