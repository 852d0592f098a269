"""Unit tests for fsmeta.core.config — TOML file, env overrides and save."""

from __future__ import annotations

import stat
from pathlib import Path

import pytest

from fsmeta.core.config import FsmetaConfig, config_to_dict, load_config, save_config
from fsmeta.core.constants import StorageFormat
from fsmeta.core.exceptions import ConfigError, ConfigNotFoundError


class TestLoadConfig:
    def test_defaults_when_missing(self, isolated_config: Path) -> None:
        config = load_config()
        assert config.storage.default_format is StorageFormat.JSON
        assert config.logging.level == "WARNING"
        assert config.open.command == ""
        assert config.config_path == isolated_config

    def test_required_but_missing(self) -> None:
        with pytest.raises(ConfigNotFoundError):
            load_config(required=True)

    def test_reads_toml(self, isolated_config: Path) -> None:
        isolated_config.write_text(
            '[storage]\ndefault_format = "binary"\n\n'
            '[logging]\nlevel = "debug"\nformat = "JSON"\n\n'
            '[open]\ncommand = "firefox --new-tab"\n'
        )
        config = load_config()
        assert config.storage.default_format is StorageFormat.BINARY
        assert config.logging.level == "DEBUG"
        assert config.logging.format == "json"
        assert config.open.command == "firefox --new-tab"

    def test_explicit_path(self, tmp_path: Path) -> None:
        cfg = tmp_path / "other.toml"
        cfg.write_text('[storage]\ndefault_format = "json-pretty"\n')
        assert load_config(cfg).storage.default_format is StorageFormat.JSON_PRETTY

    def test_malformed_toml(self, isolated_config: Path) -> None:
        isolated_config.write_text("[storage\n")
        with pytest.raises(ConfigError, match="Cannot read"):
            load_config()

    @pytest.mark.parametrize(
        "body",
        [
            '[logging]\nlevel = "LOUD"\n',
            '[logging]\nformat = "xml"\n',
            '[storage]\ndefault_format = "yaml"\n',
        ],
    )
    def test_invalid_values(self, isolated_config: Path, body: str) -> None:
        isolated_config.write_text(body)
        with pytest.raises(ConfigError, match="Invalid config"):
            load_config()


class TestEnvOverrides:
    def test_env_beats_file(self, isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        isolated_config.write_text('[logging]\nlevel = "ERROR"\n')
        monkeypatch.setenv("FSMETA_LOG_LEVEL", "info")
        monkeypatch.setenv("FSMETA_DEFAULT_FORMAT", "binary")
        monkeypatch.setenv("FSMETA_OPEN_COMMAND", "xdg-open")
        config = load_config()
        assert config.logging.level == "INFO"
        assert config.storage.default_format is StorageFormat.BINARY
        assert config.open.command == "xdg-open"

    def test_bad_env_value(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FSMETA_DEFAULT_FORMAT", "csv")
        with pytest.raises(ConfigError):
            load_config()


class TestSaveConfig:
    def test_round_trip(self, isolated_config: Path) -> None:
        data = config_to_dict(FsmetaConfig())
        data["storage"]["default_format"] = "json-pretty"
        path = save_config(data)
        assert path == isolated_config
        assert load_config().storage.default_format is StorageFormat.JSON_PRETTY

    def test_permissions(self, isolated_config: Path) -> None:
        path = save_config(config_to_dict(FsmetaConfig()))
        assert stat.S_IMODE(path.stat().st_mode) == 0o600
        assert not path.with_suffix(".tmp").exists()

    def test_creates_parent(self, tmp_path: Path) -> None:
        path = save_config(config_to_dict(FsmetaConfig()), tmp_path / "nested" / "config.toml")
        assert path.exists()
