"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from panelhub.hub import BroadcastHub
from panelhub.settings import SettingsStore


class RecordingChannel:
    """Channel that keeps every frame it is sent."""

    def __init__(self) -> None:
        self.frames: list[str] = []

    def send(self, frame: str) -> None:
        self.frames.append(frame)


class BrokenChannel:
    """Channel whose connection has gone away."""

    def send(self, frame: str) -> None:
        raise BrokenPipeError("client went away")


@pytest.fixture
def hub() -> BroadcastHub:
    """Provide a started hub with the default capacity."""
    h = BroadcastHub()
    h.start()
    return h


@pytest.fixture
def make_channel():
    """Factory for recording channels."""
    return RecordingChannel


@pytest.fixture
def broken_channel() -> BrokenChannel:
    return BrokenChannel()


@pytest.fixture
def settings_store(tmp_path: Path) -> SettingsStore:
    """Provide a settings store in a temp directory."""
    return SettingsStore(tmp_path / "panelhub" / "settings.json")
