"""Trust delta calculation.

A store's TrustProfile (0-100 per dimension) is a running accumulator: it is
never recomputed from history. Every movement is a bounded delta with a
reason code, and the matching TrustEvent row makes it explainable.

Dimensions:
- overall
- product_satisfaction
- claim_accuracy
- support_responsiveness
- policy_clarity

This module is pure (no I/O). Persistence lives in ``trust_ledger``.
"""

from dataclasses import dataclass, fields
from enum import Enum


class TrustReason(Enum):
    """Why a trust profile moved."""

    REVIEW_POSTED = "REVIEW_POSTED"
    MERCHANT_REPLIED_IN_THREAD = "MERCHANT_REPLIED_IN_THREAD"
    POLICY_UPDATED = "POLICY_UPDATED"


SCORE_MIN = 0.0
SCORE_MAX = 100.0
DEFAULT_SCORE = 50.0


@dataclass(frozen=True)
class TrustDeltas:
    """Per-dimension adjustments applied in one step."""

    overall: float = 0.0
    product_satisfaction: float = 0.0
    claim_accuracy: float = 0.0
    support_responsiveness: float = 0.0
    policy_clarity: float = 0.0

    def as_dict(self) -> dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


DIMENSIONS: tuple[str, ...] = tuple(f.name for f in fields(TrustDeltas))

# Review contribution at the extremes (rating 5 -> +max, rating 1 -> -max)
_REVIEW_OVERALL_WEIGHT = 5.0
_REVIEW_PRODUCT_SATISFACTION_WEIGHT = 8.0

# Fixed deltas by reason code
_FIXED_DELTAS = {
    TrustReason.MERCHANT_REPLIED_IN_THREAD: TrustDeltas(overall=1.0, support_responsiveness=3.0),
    TrustReason.POLICY_UPDATED: TrustDeltas(overall=0.5, policy_clarity=2.0),
}


def normalize_rating(rating: int) -> float:
    """Map a 1-5 star rating onto -1..+1 (3 stars is neutral)."""
    if rating < 1 or rating > 5:
        raise ValueError(f"rating must be between 1 and 5, got {rating}")
    return (rating - 3) / 2


def review_deltas(rating: int) -> TrustDeltas:
    """Deltas contributed by a single review."""
    n = normalize_rating(rating)
    return TrustDeltas(
        overall=n * _REVIEW_OVERALL_WEIGHT,
        product_satisfaction=n * _REVIEW_PRODUCT_SATISFACTION_WEIGHT,
    )


def fixed_deltas(reason: TrustReason) -> TrustDeltas:
    """Deltas for reason codes that always move the profile by the same amount."""
    try:
        return _FIXED_DELTAS[reason]
    except KeyError:
        raise ValueError(f"No fixed delta defined for {reason.name}") from None


def clamp_score(score: float) -> float:
    return max(SCORE_MIN, min(SCORE_MAX, score))


def apply_deltas(scores: dict[str, float], deltas: TrustDeltas) -> tuple[dict[str, float], list[str]]:
    """Apply deltas to current scores, clamping each dimension.

    Returns:
        (new_scores, clamped_dimensions). A dimension is listed when clamping
        changed the result, mirroring the CLAMPED marker recorded on events.
    """
    updated: dict[str, float] = {}
    clamped: list[str] = []
    for name, delta in deltas.as_dict().items():
        raw = scores[name] + delta
        value = clamp_score(raw)
        if value != raw:
            clamped.append(name)
        updated[name] = value
    return updated, clamped
