"""Tests for the console wiring."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from panelhub.config import Config
from panelhub.panel import PanelError
from panelhub.runner import HELP_TEXT, handle_line, serve


@pytest.fixture
def panel():
    p = MagicMock()
    p.ask = AsyncMock()
    p.refresh_host_info = AsyncMock()
    p.add_marker = AsyncMock()
    p.run_code = AsyncMock()
    p.last_code.return_value = "app.name"
    return p


@pytest.fixture
def server():
    s = MagicMock()
    s.url = "http://127.0.0.1:5555/sse"
    return s


async def test_plain_line_asks(panel, server):
    assert await handle_line(panel, server, "hello there") is True
    panel.ask.assert_awaited_once_with("hello there")


async def test_blank_line_is_ignored(panel, server):
    assert await handle_line(panel, server, "   ") is True
    panel.ask.assert_not_awaited()


@pytest.mark.parametrize("line", ["/quit", "/exit"])
async def test_quit(panel, server, line):
    assert await handle_line(panel, server, line) is False


async def test_host_and_marker(panel, server):
    await handle_line(panel, server, "/host")
    await handle_line(panel, server, "/marker")
    panel.refresh_host_info.assert_awaited_once()
    panel.add_marker.assert_awaited_once()


async def test_run_with_code(panel, server):
    await handle_line(panel, server, "/run alert(1)")
    panel.run_code.assert_awaited_once_with("alert(1)")


async def test_run_defaults_to_last_code(panel, server):
    await handle_line(panel, server, "/run")
    panel.run_code.assert_awaited_once_with("app.name")


async def test_code_prints_last_block(panel, server, capsys):
    await handle_line(panel, server, "/code")
    assert capsys.readouterr().out.strip() == "app.name"


async def test_include_toggle(panel, server):
    await handle_line(panel, server, "/include on")
    panel.set_include_host_info.assert_called_once_with(True)
    with pytest.raises(PanelError):
        await handle_line(panel, server, "/include maybe")


async def test_key(panel, server):
    await handle_line(panel, server, "/key sk-123")
    panel.set_api_key.assert_called_once_with("sk-123")
    with pytest.raises(PanelError):
        await handle_line(panel, server, "/key")


async def test_status_and_help(panel, server, capsys):
    await handle_line(panel, server, "/status")
    await handle_line(panel, server, "/help")
    out = capsys.readouterr().out
    assert "http://127.0.0.1:5555/sse" in out
    assert HELP_TEXT in out


async def test_unknown_command(panel, server):
    with pytest.raises(PanelError, match="Unknown command"):
        await handle_line(panel, server, "/dance")


async def test_serve_starts_and_stops_server(tmp_path):
    config = Config(data_dir=tmp_path)
    fake_server = MagicMock()
    fake_server.start = AsyncMock(return_value="http://127.0.0.1:1/sse")
    fake_server.stop = AsyncMock()

    with patch("panelhub.runner.BroadcastServer", return_value=fake_server), \
         patch("panelhub.runner._console", new=AsyncMock()) as console:
        await serve(config)

    fake_server.start.assert_awaited_once()
    console.assert_awaited_once()
    fake_server.stop.assert_awaited_once()


async def test_serve_continues_when_server_fails(tmp_path, capsys):
    config = Config(data_dir=tmp_path)
    fake_server = MagicMock()
    fake_server.start = AsyncMock(return_value=None)
    fake_server.stop = AsyncMock()

    with patch("panelhub.runner.BroadcastServer", return_value=fake_server), \
         patch("panelhub.runner._console", new=AsyncMock()) as console:
        await serve(config)

    console.assert_awaited_once()
    assert "could not start" in capsys.readouterr().out
