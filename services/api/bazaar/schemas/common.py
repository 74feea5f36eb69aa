"""Common schemas used across the API."""

from typing import Any

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Structured error detail."""

    code: str
    message: str
    detail: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    """Standard error response format.

    Format: { "error": { "code": str, "message": str, "detail": object } }
    """

    error: ErrorDetail


class BlockedResponse(BaseModel):
    """Purchase refused for lack of interaction evidence (HTTP 403)."""

    success: bool = False
    blocked: bool = True
    error: str
    required_actions: list[str] = Field(alias="requiredActions")

    model_config = {"populate_by_name": True}
