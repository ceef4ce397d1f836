"""FastAPI application factory for the broadcast endpoints."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from panelhub.hub import BroadcastHub


async def _not_found_as_text(request: Request, exc: StarletteHTTPException) -> Response:
    if exc.status_code == 404:
        return PlainTextResponse("Not Found", status_code=404)
    return await http_exception_handler(request, exc)


def create_api(hub: BroadcastHub) -> FastAPI:
    """Create the FastAPI app bound to ``hub``."""
    app = FastAPI(
        title="Panelhub Broadcast",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    app.state.hub = hub

    # Listening tools may be browser pages on other origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    from panelhub.api.routes import health, snapshot, stream

    app.include_router(stream.router)
    app.include_router(snapshot.router)
    app.include_router(health.router)

    app.add_exception_handler(StarletteHTTPException, _not_found_as_text)

    return app
