"""Panel controller: prompt, host-info and script actions.

Every action reports into the broadcast hub, which doubles as the
panel's output log.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable

from panelhub.bridge import (
    ADD_MARKER_CALL,
    HOST_SUMMARY_CALL,
    BridgeError,
    HostBridge,
    normalize_result,
    run_script_call,
)
from panelhub.chat import ChatClient, ChatError
from panelhub.events import EventRecord
from panelhub.hub import BroadcastHub
from panelhub.settings import PanelSettings, SettingsStore

logger = logging.getLogger(__name__)

# First fenced block, optional language tag
_CODE_BLOCK_RE = re.compile(r"```(?:\w+)?\n(.*?)```", re.DOTALL)

HOST_CONTEXT_HEADER = "[Host project info]"


class PanelError(ValueError):
    """User input is missing or unusable."""


def extract_code_block(text: str) -> str:
    """Return the first fenced code block in ``text``, stripped, or ""."""
    match = _CODE_BLOCK_RE.search(text or "")
    return match.group(1).strip() if match else ""


class Panel:
    """Drives the chat model and the host bridge, publishing as it goes."""

    def __init__(
        self,
        hub: BroadcastHub,
        chat: ChatClient,
        bridge: HostBridge,
        settings: PanelSettings | None = None,
        store: SettingsStore | None = None,
        model: str | None = None,
        echo: Callable[[EventRecord], None] | None = None,
    ) -> None:
        self.hub = hub
        self._echo = echo
        self._chat = chat
        self._bridge = bridge
        self._store = store
        self._model = model
        if settings is None:
            settings = store.load() if store is not None else PanelSettings()
        self.settings = settings
        self.last_reply = ""
        self.host_info = ""

    def notify(self, role: str, text: str) -> EventRecord:
        """Publish one line of panel output."""
        record = self.hub.publish(role, text)
        if self._echo is not None:
            self._echo(record)
        return record

    # -- preferences --

    def set_api_key(self, api_key: str) -> None:
        self.settings.api_key = api_key.strip()
        self._save()

    def set_include_host_info(self, enabled: bool) -> None:
        self.settings.include_host_info = enabled
        self._save()

    def _save(self) -> None:
        if self._store is not None:
            self._store.save(self.settings)

    # -- chat --

    def build_prompt(self, prompt: str) -> tuple[str, bool]:
        """Append host context when enabled. Returns (prompt, context_added)."""
        if self.settings.include_host_info and self.host_info:
            return f"{prompt}\n\n{HOST_CONTEXT_HEADER}\n{self.host_info}", True
        return prompt, False

    async def ask(self, prompt: str) -> str | None:
        """Send a prompt to the chat model.

        Returns the reply, or None if the request failed (the failure is
        published as a system notice).

        Raises:
            PanelError: API key or prompt missing.
        """
        api_key = self.settings.api_key.strip()
        prompt = prompt.strip()
        if not api_key or not prompt:
            raise PanelError("Enter both an API key and a prompt.")

        final_prompt, with_context = self.build_prompt(prompt)
        self.notify("user", prompt)
        if with_context:
            self.notify("system", "Included project information in the prompt.")

        try:
            reply = await self._chat.complete(api_key, final_prompt, self._model)
        except ChatError as e:
            self.notify("system", f"Error: {e}")
            return None

        self.last_reply = reply or ""
        self.notify("assistant", reply)
        return reply

    def last_code(self) -> str:
        """Code block from the most recent reply, or ""."""
        return extract_code_block(self.last_reply)

    # -- host bridge --

    def _bridge_failed(self, error: BridgeError) -> None:
        logger.warning("Host bridge call failed: %s", error)
        self.notify("system", str(error))

    async def _eval(self, source: str) -> str | None:
        try:
            return normalize_result(await self._bridge.eval_script(source))
        except BridgeError as e:
            self._bridge_failed(e)
            return None

    async def refresh_host_info(self) -> str:
        """Fetch the host project summary and publish it as host state.

        A bridge failure leaves the previous host info in place.
        """
        try:
            raw = await self._bridge.eval_script(HOST_SUMMARY_CALL)
        except BridgeError as e:
            self._bridge_failed(e)
            return self.host_info
        self.host_info = normalize_result(raw) or ""
        self.hub.set_external_state(self.host_info)
        if self.host_info:
            self.notify("system", f"Project information loaded.\n{self.host_info}")
            self.notify("host", self.host_info)
        else:
            self.notify("system", "No project information available.")
        return self.host_info

    async def add_marker(self) -> str | None:
        """Add a marker at the playhead in the active sequence or composition."""
        result = await self._eval(ADD_MARKER_CALL)
        if result:
            self.notify("system", result)
        return result

    async def run_code(self, code: str) -> str | None:
        """Evaluate script code in the host.

        Raises:
            PanelError: ``code`` is empty.
        """
        code = code.strip()
        if not code:
            raise PanelError("Enter code to run.")
        result = await self._eval(run_script_call(code))
        if result:
            self.notify("system", result)
        return result
