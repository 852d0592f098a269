"""fsmeta configuration: Pydantic model, load, and save."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from fsmeta.core.constants import CONFIG_DIR_NAME, CONFIG_FILENAME, DEFAULT_FORMAT, StorageFormat
from fsmeta.core.exceptions import ConfigError, ConfigNotFoundError


def fsmeta_dir() -> Path:
    """Return the user config directory (~/.fsmeta). Not created here."""
    return Path.home() / CONFIG_DIR_NAME


# ---------------------------------------------------------------------------
# Sub-models
# ---------------------------------------------------------------------------


class StorageConfig(BaseModel):
    default_format: StorageFormat = DEFAULT_FORMAT


class LoggingConfig(BaseModel):
    level: str = "WARNING"
    format: str = "text"  # "text" | "json"

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {sorted(allowed)}")
        return v.upper()

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        if v.lower() not in ("text", "json"):
            raise ValueError("Log format must be 'text' or 'json'")
        return v.lower()


class OpenConfig(BaseModel):
    # Empty → the platform's default handler. Otherwise the URL is appended
    # as the final argument, e.g. "firefox --new-tab".
    command: str = ""


# ---------------------------------------------------------------------------
# Root config
# ---------------------------------------------------------------------------


class FsmetaConfig(BaseModel):
    """Root fsmeta configuration model."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    open: OpenConfig = Field(default_factory=OpenConfig)

    _config_path: Path | None = None

    @property
    def config_path(self) -> Path | None:
        return self._config_path


# ---------------------------------------------------------------------------
# Load / save
# ---------------------------------------------------------------------------


def _config_file_path() -> Path:
    if env_path := os.environ.get("FSMETA_CONFIG"):
        return Path(env_path).expanduser()
    return fsmeta_dir() / CONFIG_FILENAME


def load_config(path: Path | None = None, *, required: bool = False) -> FsmetaConfig:
    """
    Load FsmetaConfig from TOML file, overlaid with environment variables.

    Priority (highest to lowest):
      1. Environment variables (FSMETA_*)
      2. Config file (~/.fsmeta/config.toml)
      3. Built-in defaults

    A missing file is only an error when *required* is set.
    """
    import tomllib

    cfg_path = path or _config_file_path()

    data: dict[str, Any] = {}
    if cfg_path.exists():
        try:
            with open(cfg_path, "rb") as f:
                data = tomllib.load(f)
        except Exception as exc:
            raise ConfigError(f"Cannot read config file {cfg_path}: {exc}") from exc
    elif required:
        raise ConfigNotFoundError(
            f"No config file at {cfg_path}. Run 'fsm config init' to create one."
        )

    _apply_env_overrides(data)

    try:
        config = FsmetaConfig.model_validate(data)
    except Exception as exc:
        raise ConfigError(f"Invalid config at {cfg_path}: {exc}") from exc

    config._config_path = cfg_path
    return config


def _apply_env_overrides(data: dict[str, Any]) -> None:
    """Overlay FSMETA_* environment variables onto the parsed TOML data."""
    if level := os.environ.get("FSMETA_LOG_LEVEL"):
        data.setdefault("logging", {})["level"] = level
    if fmt := os.environ.get("FSMETA_DEFAULT_FORMAT"):
        data.setdefault("storage", {})["default_format"] = fmt
    if command := os.environ.get("FSMETA_OPEN_COMMAND"):
        data.setdefault("open", {})["command"] = command


def config_to_dict(config: FsmetaConfig) -> dict[str, Any]:
    """Plain TOML-serialisable dict of *config*."""
    return config.model_dump(mode="json")


def save_config(config_data: dict[str, Any], path: Path | None = None) -> Path:
    """Write config dict to TOML file with secure permissions (0600)."""
    import tomli_w

    cfg_path = path or _config_file_path()
    cfg_path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)

    # Write atomically
    tmp_path = cfg_path.with_suffix(".tmp")
    try:
        with open(tmp_path, "wb") as f:
            tomli_w.dump(config_data, f)
        tmp_path.rename(cfg_path)
    except Exception as exc:
        tmp_path.unlink(missing_ok=True)
        raise ConfigError(f"Cannot write config to {cfg_path}: {exc}") from exc

    cfg_path.chmod(0o600)
    return cfg_path
