"""Tests for configuration module."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from panelhub.config import Config, _parse_int


class TestParseInt:
    def test_number(self):
        assert _parse_int("8080", 0) == 8080

    def test_unset_uses_default(self):
        assert _parse_int(None, 50) == 50
        assert _parse_int("  ", 50) == 50

    def test_garbage(self):
        with pytest.raises(ValueError, match="integer"):
            _parse_int("eighty", 0)


class TestConfig:
    def test_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        cfg = Config()
        assert cfg.host == "127.0.0.1"
        assert cfg.port == 0
        assert cfg.history_size == 50
        assert cfg.data_dir == tmp_path / ".panelhub"
        assert cfg.settings_path == tmp_path / ".panelhub" / "settings.json"

    def test_validate_ok(self):
        assert Config().validate() == []

    def test_validate_port(self):
        errors = Config(port=70000).validate()
        assert any("PANELHUB_PORT" in e for e in errors)

    def test_validate_history_size(self):
        errors = Config(history_size=0).validate()
        assert any("PANELHUB_HISTORY_SIZE" in e for e in errors)

    def test_validate_host(self):
        assert any("PANELHUB_HOST" in e for e in Config(host="").validate())

    @patch.dict(
        "os.environ",
        {
            "PANELHUB_HOST": "0.0.0.0",
            "PANELHUB_PORT": "8765",
            "PANELHUB_HISTORY_SIZE": "10",
            "OPENAI_API_KEY": "sk-env",
            "PANELHUB_MODEL": "gpt-4o",
            "PANELHUB_DATA_DIR": "/tmp/panelhub-data",
        },
    )
    def test_from_env(self):
        cfg = Config.from_env()
        assert cfg.host == "0.0.0.0"
        assert cfg.port == 8765
        assert cfg.history_size == 10
        assert cfg.api_key == "sk-env"
        assert cfg.model == "gpt-4o"
        assert cfg.data_dir == Path("/tmp/panelhub-data")

    @patch.dict("os.environ", {"PANELHUB_PORT": "8765", "PANELHUB_HISTORY_SIZE": "10"})
    def test_from_args_overrides_env(self):
        cfg = Config.from_args(port=0, history_size=5, data_dir="/tmp/x")
        assert cfg.port == 0
        assert cfg.history_size == 5
        assert cfg.data_dir == Path("/tmp/x")

    @patch.dict("os.environ", {"PANELHUB_PORT": "8765"})
    def test_from_args_falls_back_to_env(self):
        cfg = Config.from_args()
        assert cfg.port == 8765
