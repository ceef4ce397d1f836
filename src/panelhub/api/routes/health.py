"""Health and status endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health(request: Request) -> dict:
    """Hub status: running flag, subscriber count, history fill."""
    hub = request.app.state.hub
    return {
        "running": hub.is_running,
        "subscribers": hub.subscriber_count,
        "history_size": hub.history_size,
        "capacity": hub.capacity,
    }
