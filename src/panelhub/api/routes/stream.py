"""Server-Sent Events endpoint for live event streaming."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import StreamingResponse

from panelhub.hub import BroadcastHub, HubStoppedError
from panelhub.sse import QueueChannel, format_comment

logger = logging.getLogger(__name__)

router = APIRouter(tags=["stream"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


async def _close_on_disconnect(request: Request, channel: QueueChannel) -> None:
    """Close ``channel`` once the server reports the client gone."""
    try:
        while True:
            message = await request.receive()
            if message["type"] == "http.disconnect":
                logger.debug("SSE client disconnected")
                return
    except Exception:
        logger.debug("SSE receive failed", exc_info=True)
    finally:
        channel.close()


async def event_stream(
    hub: BroadcastHub,
    channel: QueueChannel,
    request: Request | None = None,
) -> AsyncIterator[str]:
    """Attach ``channel`` to the hub and yield its frames until closed.

    The handle is detached when the client goes away, the send fails,
    or the hub stops.
    """
    try:
        handle = hub.attach(channel, on_detach=channel.close)
    except HubStoppedError:
        logger.debug("Hub stopped before stream opened")
        return
    watcher = None
    if request is not None:
        watcher = asyncio.create_task(_close_on_disconnect(request, channel))
    try:
        yield format_comment("connected")
        async for frame in channel.frames():
            yield frame
    finally:
        hub.detach(handle)
        if watcher is not None:
            watcher.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await watcher


@router.get("/sse")
async def stream(request: Request) -> StreamingResponse:
    """Stream events published from now on.

    Connect: GET http://host:port/sse
    Sends frames: ``data: {"id", "timestamp", "role", "text"}``
    """
    hub: BroadcastHub = request.app.state.hub
    if not hub.is_running:
        raise HTTPException(status_code=503, detail="Broadcast hub is not running")
    return StreamingResponse(
        event_stream(hub, QueueChannel(), request),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
