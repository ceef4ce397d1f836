"""Panelhub: chat panel for creative host applications with a live broadcast hub.

Library API::

    from panelhub import BroadcastHub

    hub = BroadcastHub(capacity=50)
    hub.start()
    hub.publish("system", "ready")

    from panelhub import PanelHub

    PanelHub(port=8765).run()
"""

from __future__ import annotations

import asyncio
import logging

from panelhub.config import Config
from panelhub.events import EventRecord
from panelhub.hub import BroadcastHub, HubSnapshot
from panelhub.runner import serve

__all__ = ["BroadcastHub", "Config", "EventRecord", "HubSnapshot", "PanelHub"]


class PanelHub:
    """High-level API for running the panel console and broadcast server.

    Args:
        host: Bind address for the broadcast server.
        port: Port for the broadcast server; 0 picks a free one.
        history_size: Number of events kept for ``/snapshot``.
        api_key: Chat API key used when none is saved.
        data_dir: Directory for settings persistence. Defaults to
            ``<cwd>/.panelhub``.
    """

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        history_size: int | None = None,
        api_key: str | None = None,
        data_dir: str | None = None,
    ):
        self.config = Config.from_args(
            host=host,
            port=port,
            history_size=history_size,
            api_key=api_key,
            data_dir=data_dir,
        )

    async def serve(self, interactive: bool = True) -> None:
        """Run until the console exits (or until cancelled)."""
        errors = self.config.validate()
        if errors:
            raise ValueError("; ".join(errors))
        await serve(self.config, interactive=interactive)

    def run(self) -> None:
        """Start the console and server (blocking)."""
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.INFO,
        )
        logging.getLogger("httpx").setLevel(logging.WARNING)
        asyncio.run(self.serve())
