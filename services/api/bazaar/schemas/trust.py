"""Schemas for trust profiles and events (/v1/trust)."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from bazaar.models import Store, TrustEvent, TrustProfile


class TrustProfileOut(BaseModel):
    store_id: str = Field(alias="storeId")
    overall_score: float = Field(alias="overallScore", ge=0, le=100)
    product_satisfaction_score: float = Field(alias="productSatisfactionScore", ge=0, le=100)
    claim_accuracy_score: float = Field(alias="claimAccuracyScore", ge=0, le=100)
    support_responsiveness_score: float = Field(alias="supportResponsivenessScore", ge=0, le=100)
    policy_clarity_score: float = Field(alias="policyClarityScore", ge=0, le=100)
    last_updated_at: datetime = Field(alias="lastUpdatedAt")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_model(cls, profile: TrustProfile) -> "TrustProfileOut":
        return cls(
            store_id=profile.store_id,
            overall_score=profile.overall_score,
            product_satisfaction_score=profile.product_satisfaction_score,
            claim_accuracy_score=profile.claim_accuracy_score,
            support_responsiveness_score=profile.support_responsiveness_score,
            policy_clarity_score=profile.policy_clarity_score,
            last_updated_at=profile.last_updated_at,
        )


class TrustEventOut(BaseModel):
    id: str
    store_id: str = Field(alias="storeId")
    reason: str
    deltas: dict[str, float]
    linked_order_id: str | None = Field(alias="linkedOrderId", default=None)
    linked_review_id: str | None = Field(alias="linkedReviewId", default=None)
    linked_thread_id: str | None = Field(alias="linkedThreadId", default=None)
    meta: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(alias="createdAt")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_model(cls, event: TrustEvent) -> "TrustEventOut":
        return cls(
            id=event.id,
            store_id=event.store_id,
            reason=event.reason.value,
            deltas={
                "overall": event.delta_overall,
                "productSatisfaction": event.delta_product_satisfaction,
                "claimAccuracy": event.delta_claim_accuracy,
                "supportResponsiveness": event.delta_support_responsiveness,
                "policyClarity": event.delta_policy_clarity,
            },
            linked_order_id=event.linked_order_id,
            linked_review_id=event.linked_review_id,
            linked_thread_id=event.linked_thread_id,
            meta=event.meta or {},
            created_at=event.created_at,
        )


class LeaderboardEntry(BaseModel):
    rank: int = Field(ge=1)
    store_id: str = Field(alias="storeId")
    store_name: str = Field(alias="storeName")
    overall_score: float = Field(alias="overallScore")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_row(cls, rank: int, store: Store, profile: TrustProfile) -> "LeaderboardEntry":
        return cls(
            rank=rank,
            store_id=store.id,
            store_name=store.name,
            overall_score=profile.overall_score,
        )


class MerchantReplyRequest(BaseModel):
    thread_id: str | None = Field(alias="threadId", default=None)

    model_config = {"populate_by_name": True}
