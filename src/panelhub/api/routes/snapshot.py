"""Snapshot endpoint: retained history plus last-known host info."""

from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter(tags=["snapshot"])


@router.get("/snapshot")
async def snapshot(request: Request) -> dict:
    """Return ``{"hostInfo", "history"}`` with history newest first."""
    return request.app.state.hub.get_snapshot().to_dict()
