"""Run the broadcast endpoints under uvicorn as a background task."""

from __future__ import annotations

import asyncio
import contextlib
import logging

import uvicorn

from panelhub.api.app import create_api
from panelhub.hub import BroadcastHub

logger = logging.getLogger(__name__)

# Seconds to wait for uvicorn to bind before giving up.
STARTUP_TIMEOUT = 10.0


class BroadcastServer:
    """Binds a hub to HTTP: ``/sse``, ``/snapshot`` and ``/health``.

    ``port=0`` asks the OS for a free port; the chosen address is
    available from ``url`` once ``start()`` returns.
    """

    def __init__(self, hub: BroadcastHub, host: str = "127.0.0.1", port: int = 0) -> None:
        self._hub = hub
        self._host = host
        self._port = port
        self._server: uvicorn.Server | None = None
        self._task: asyncio.Task | None = None
        self._url: str | None = None
        self._error: BaseException | None = None

    @property
    def url(self) -> str | None:
        """Stream URL, or None when not running."""
        return self._url

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> str | None:
        """Start serving and return the stream URL.

        A failure to bind is reported as a system notice on the hub and
        None is returned; the hub keeps recording history either way.
        """
        if self.running:
            return self._url

        cfg = uvicorn.Config(
            create_api(self._hub),
            host=self._host,
            port=self._port,
            log_level="info",
            access_log=False,
            lifespan="off",
            timeout_graceful_shutdown=5,
        )
        self._server = uvicorn.Server(cfg)
        self._error = None
        self._hub.start()
        self._task = asyncio.create_task(self._serve(self._server), name="panelhub-broadcast")

        loop = asyncio.get_running_loop()
        deadline = loop.time() + STARTUP_TIMEOUT
        while not self._server.started and not self._task.done():
            if loop.time() > deadline:
                self._error = TimeoutError("server did not start in time")
                break
            await asyncio.sleep(0.05)

        if not self._server.started:
            if not self._task.done():
                self._server.should_exit = True
                self._task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await self._task
            self._task = None
            self._hub.stop()
            reason = self._error or "unknown error"
            self._hub.publish("system", f"Broadcast server error: {reason}")
            logger.error("Broadcast server failed to start: %s", reason)
            self._server = None
            return None

        port = self._server.servers[0].sockets[0].getsockname()[1]
        self._url = f"http://{self._host}:{port}/sse"
        logger.info("Broadcast server listening on %s", self._url)
        self._hub.publish("system", f"Broadcast server started: {self._url}")
        return self._url

    async def stop(self) -> None:
        """Close every stream and shut the server down."""
        # Ending the streams first lets uvicorn finish without waiting
        self._hub.stop()
        if self._server is not None:
            self._server.should_exit = True
        if self._task is not None:
            await self._task
        self._server = None
        self._task = None
        self._url = None
        logger.info("Broadcast server stopped")

    async def _serve(self, server: uvicorn.Server) -> None:
        try:
            await server.serve()
        # uvicorn calls sys.exit() when it cannot bind
        except SystemExit:
            self._error = OSError(f"could not listen on {self._host}:{self._port}")
            logger.error("Broadcast server exited: %s", self._error)
        except Exception as e:
            self._error = e
            logger.error("Broadcast server crashed", exc_info=True)
