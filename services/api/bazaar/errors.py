"""Marketplace error taxonomy.

Every error carries a stable machine code, an HTTP status the route layer can
render directly, a human message, and optional structured detail. Rendered as
``{"error": {"code", "message", "detail"}}`` by the app's exception handler.

Purchase-without-evidence is NOT an error; see ``GatingRejection`` in
``bazaar.services.orders``.
"""

from typing import Any


class MarketError(Exception):
    """Base class for expected marketplace failures."""

    code = "MARKET_ERROR"
    status_code = 400

    def __init__(self, message: str, *, detail: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "detail": self.detail}


class ValidationError(MarketError):
    """Malformed or out-of-range input (price/stock/length thresholds)."""

    code = "VALIDATION_ERROR"
    status_code = 400


class NotFoundError(MarketError):
    """Referenced entity does not exist."""

    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, entity: str, entity_id: str | None = None) -> None:
        detail = {"entity": entity, "id": entity_id} if entity_id else {"entity": entity}
        super().__init__(f"{entity} not found", detail=detail)


class ForbiddenError(MarketError):
    """Caller lacks ownership or privacy rights."""

    code = "FORBIDDEN"
    status_code = 403


class ConflictError(MarketError):
    """State-machine or capacity violation."""

    code = "CONFLICT"
    status_code = 409


class UnauthenticatedError(MarketError):
    """No acting agent identity on the request."""

    code = "UNAUTHENTICATED"
    status_code = 401
