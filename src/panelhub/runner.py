"""Wires hub, broadcast server and panel into an interactive console."""

from __future__ import annotations

import asyncio
import logging

from panelhub.api.server import BroadcastServer
from panelhub.bridge import HostBridge, UnavailableBridge
from panelhub.chat import ChatClient
from panelhub.config import Config
from panelhub.events import EventRecord
from panelhub.hub import BroadcastHub
from panelhub.panel import Panel, PanelError
from panelhub.settings import SettingsStore

logger = logging.getLogger(__name__)

HELP_TEXT = """\
Type a prompt to send it to the chat model, or a command:
  /host            refresh host project info
  /marker          add a marker at the playhead
  /code            show the code block from the last reply
  /run [code]      run code in the host (default: last reply's code)
  /include on|off  include host info in prompts
  /key <api-key>   save the API key
  /status          show broadcast server status
  /help            show this help
  /quit            exit"""


def _print_record(record: EventRecord) -> None:
    print(f"[{record.role}] {record.text}")


async def handle_line(panel: Panel, server: BroadcastServer | None, line: str) -> bool:
    """Run one console line. Returns False when the user asked to quit."""
    line = line.strip()
    if not line:
        return True
    if not line.startswith("/"):
        await panel.ask(line)
        return True

    command, _, arg = line.partition(" ")
    arg = arg.strip()

    if command in ("/quit", "/exit"):
        return False
    elif command == "/help":
        print(HELP_TEXT)
    elif command == "/host":
        await panel.refresh_host_info()
    elif command == "/marker":
        await panel.add_marker()
    elif command == "/code":
        code = panel.last_code()
        print(code if code else "No code block found in the last reply.")
    elif command == "/run":
        await panel.run_code(arg or panel.last_code())
    elif command == "/include":
        if arg not in ("on", "off"):
            raise PanelError("Usage: /include on|off")
        panel.set_include_host_info(arg == "on")
        print(f"Include host info: {arg}")
    elif command == "/key":
        if not arg:
            raise PanelError("Usage: /key <api-key>")
        panel.set_api_key(arg)
        print("API key saved.")
    elif command == "/status":
        url = server.url if server is not None else None
        print(f"Broadcast server: {url or 'not running'}")
    else:
        raise PanelError(f"Unknown command: {command}. Type /help.")
    return True


async def _console(panel: Panel, server: BroadcastServer | None) -> None:
    print(HELP_TEXT)
    while True:
        try:
            line = await asyncio.to_thread(input, "> ")
        except EOFError:
            break
        try:
            if not await handle_line(panel, server, line):
                break
        except PanelError as e:
            print(e)


async def serve(
    config: Config,
    *,
    bridge: HostBridge | None = None,
    interactive: bool = True,
) -> None:
    """Start the broadcast server and run the console until it exits.

    With ``interactive=False`` the server runs until cancelled.
    """
    hub = BroadcastHub(capacity=config.history_size)
    server = BroadcastServer(hub, host=config.host, port=config.port)
    store = SettingsStore(config.settings_path)
    panel = Panel(
        hub,
        ChatClient(),
        bridge or UnavailableBridge(),
        store=store,
        model=config.model,
        echo=_print_record,
    )
    if config.api_key and not panel.settings.has_api_key:
        panel.settings.api_key = config.api_key

    url = await server.start()
    if url is None:
        logger.warning("Continuing without broadcast server")
        print("Broadcast server could not start; continuing without it.")
    else:
        print(f"Broadcasting on {url}")

    try:
        if interactive:
            await _console(panel, server)
        else:
            await asyncio.Event().wait()
    finally:
        await server.stop()
