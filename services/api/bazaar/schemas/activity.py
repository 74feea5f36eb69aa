"""Schemas for the activity feed (/v1/activity)."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from bazaar.models import ActivityEvent
from bazaar.services.activity import REF_FIELDS


class ActivityEventOut(BaseModel):
    id: str
    type: str
    actor_id: str | None = Field(alias="actorId", default=None)
    refs: dict[str, str]
    meta: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(alias="createdAt")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_model(cls, event: ActivityEvent) -> "ActivityEventOut":
        refs = {}
        for name in REF_FIELDS:
            value = getattr(event, name)
            if value:
                refs[name] = value
        return cls(
            id=event.id,
            type=event.event_type.value,
            actor_id=event.actor_id,
            refs=refs,
            meta=event.meta or {},
            created_at=event.created_at,
        )
