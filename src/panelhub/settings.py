"""Persisted panel preferences: API key and the include-host-info toggle."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class PanelSettings:
    api_key: str = ""
    include_host_info: bool = False

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key.strip())


class SettingsStore:
    """JSON key-value file holding ``PanelSettings``."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> PanelSettings:
        """Read settings; a missing or unreadable file yields defaults."""
        if not self._path.exists():
            return PanelSettings()
        try:
            data = json.loads(self._path.read_text())
        except (json.JSONDecodeError, OSError):
            logger.warning("Could not read settings from %s, using defaults", self._path)
            return PanelSettings()
        if not isinstance(data, dict):
            logger.warning("Settings file %s is not an object, using defaults", self._path)
            return PanelSettings()
        return PanelSettings(
            api_key=str(data.get("api_key", "")).strip(),
            include_host_info=data.get("include_host_info") is True,
        )

    def save(self, settings: PanelSettings) -> None:
        """Write settings atomically."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(".tmp")
        tmp.write_text(json.dumps(asdict(settings), indent=2))
        os.replace(tmp, self._path)
        logger.debug("Saved settings to %s", self._path)
