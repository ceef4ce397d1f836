"""Environment configuration loaded from .env, env vars, or programmatic input."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from panelhub.history import DEFAULT_CAPACITY

DEFAULT_HOST = "127.0.0.1"


def _parse_int(raw: str | None, default: int) -> int:
    """Parse an integer env value, falling back to ``default`` when unset."""
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"Expected an integer, got {raw!r}") from None


@dataclass
class Config:
    """Panel configuration. Can be built from env, CLI args, or programmatic input."""

    host: str = DEFAULT_HOST
    port: int = 0
    history_size: int = DEFAULT_CAPACITY
    api_key: str = ""
    model: str | None = None
    data_dir: Path = field(default_factory=lambda: Path(os.getcwd()) / ".panelhub")

    @property
    def settings_path(self) -> Path:
        return Path(self.data_dir) / "settings.json"

    @classmethod
    def from_env(cls) -> Config:
        """Load config from environment variables and .env file."""
        load_dotenv()
        cfg = cls(
            host=os.getenv("PANELHUB_HOST", DEFAULT_HOST),
            port=_parse_int(os.getenv("PANELHUB_PORT"), 0),
            history_size=_parse_int(os.getenv("PANELHUB_HISTORY_SIZE"), DEFAULT_CAPACITY),
            api_key=os.getenv("OPENAI_API_KEY", ""),
            model=os.getenv("PANELHUB_MODEL") or None,
        )
        data_dir = os.getenv("PANELHUB_DATA_DIR")
        if data_dir:
            cfg.data_dir = Path(data_dir)
        return cfg

    @classmethod
    def from_args(
        cls,
        host: str | None = None,
        port: int | None = None,
        history_size: int | None = None,
        api_key: str | None = None,
        model: str | None = None,
        data_dir: str | None = None,
    ) -> Config:
        """Build config from explicit arguments, falling back to env."""
        env = cls.from_env()
        return cls(
            host=host or env.host,
            port=env.port if port is None else port,
            history_size=env.history_size if history_size is None else history_size,
            api_key=api_key or env.api_key,
            model=model or env.model,
            data_dir=Path(data_dir) if data_dir else env.data_dir,
        )

    def validate(self) -> list[str]:
        """Return list of validation errors, empty if config is valid."""
        errors = []
        if not 0 <= self.port <= 65535:
            errors.append(f"PANELHUB_PORT must be between 0 and 65535, got {self.port}.")
        if self.history_size < 1:
            errors.append(
                f"PANELHUB_HISTORY_SIZE must be at least 1, got {self.history_size}."
            )
        if not self.host:
            errors.append("PANELHUB_HOST is empty.")
        return errors
