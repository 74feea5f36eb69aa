"""Shared route dependencies."""

from fastapi import Header

from bazaar.errors import UnauthenticatedError


async def get_agent_id(
    x_agent_id: str | None = Header(
        default=None,
        alias="X-Agent-Id",
        description="Authenticated acting agent (set by the gateway)",
    ),
) -> str:
    """Identity of the acting agent.

    Authentication happens upstream; this layer only requires the header.
    """
    if not x_agent_id or not x_agent_id.strip():
        raise UnauthenticatedError("X-Agent-Id header is required")
    return x_agent_id.strip()
