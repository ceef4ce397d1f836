"""Host application scripting bridge.

The host (Premiere Pro, After Effects, Photoshop) evaluates script source
and hands back a string. Inside the panel runtime that goes through a
callback API; ``CallbackBridge`` turns it into an awaitable call.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable

logger = logging.getLogger(__name__)

ADD_MARKER_CALL = "addMarkerAtPlayhead()"
HOST_SUMMARY_CALL = "getHostProjectSummary()"

# Evaluator signature: evaluate(source, callback) -> None, callback(result)
Evaluator = Callable[[str, Callable[[str], None]], None]


class BridgeError(Exception):
    """The host could not evaluate a script."""


class BridgeUnavailableError(BridgeError):
    """No host application is connected."""


def run_script_call(code: str) -> str:
    """Wrap ``code`` as a ``runDynamicExtendScript("...")`` call."""
    escaped = code.replace("\\", "\\\\").replace('"', '\\"')
    escaped = escaped.replace("\r\n", "\\n").replace("\n", "\\n")
    return f'runDynamicExtendScript("{escaped}")'


def normalize_result(raw: str | None) -> str | None:
    """Map the host's empty answers (None, "", "undefined") to None."""
    if raw is None or raw == "" or raw == "undefined":
        return None
    return raw


class HostBridge(ABC):
    """Evaluates script source inside the host application."""

    @abstractmethod
    async def eval_script(self, source: str) -> str:
        """Evaluate ``source`` and return the host's string result."""


class CallbackBridge(HostBridge):
    """Adapts a callback-style evaluator to ``await eval_script(...)``.

    The callback may fire from another thread; the result is handed back
    to the awaiting loop thread-safely.
    """

    def __init__(self, evaluate: Evaluator, timeout: float | None = None) -> None:
        self._evaluate = evaluate
        self._timeout = timeout

    async def eval_script(self, source: str) -> str:
        loop = asyncio.get_running_loop()
        future: asyncio.Future[str] = loop.create_future()

        def _resolve(result: str) -> None:
            if not future.done():
                future.set_result("" if result is None else str(result))

        def _callback(result: str) -> None:
            loop.call_soon_threadsafe(_resolve, result)

        try:
            self._evaluate(source, _callback)
        except Exception as e:
            raise BridgeError(f"Script evaluation failed: {e}") from e

        try:
            return await asyncio.wait_for(future, timeout=self._timeout)
        except asyncio.TimeoutError:
            raise BridgeError(
                f"Host did not answer within {self._timeout:g}s"
            ) from None


class UnavailableBridge(HostBridge):
    """Stand-in used when running outside a host application."""

    async def eval_script(self, source: str) -> str:
        raise BridgeUnavailableError(
            "Host scripting bridge is not available. "
            "Run the panel inside a host application."
        )
