"""Configuration loading for antx."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from dotenv import dotenv_values

_log = logging.getLogger("antx.config")

APP_NAME = "antx"
CONFIG_FILENAME = "config.yaml"
SECRETS_FILE = ".env.secrets"

# Local config files, checked in order before the user config dir
_LOCAL_CONFIG_NAMES = ["antx.yaml", ".antx.yaml", "antx.yml", ".antx.yml"]

DEFAULT_STATE_FILE = "~/.antx"
DEFAULT_HISTORY_SIZE = 20
DEFAULT_TIMEOUT = 60.0


@dataclass
class ClientConfig:
    """HTTP client settings."""

    timeout: float = DEFAULT_TIMEOUT
    """Transport timeout in seconds for every request."""

    verify_tls: bool = True


@dataclass
class ShellConfig:
    """Interactive shell settings."""

    state_file: str = DEFAULT_STATE_FILE
    history_size: int = DEFAULT_HISTORY_SIZE
    prompt: str = ">>> "


@dataclass
class LoggingConfig:
    """Logging settings."""

    level: str | None = None  # e.g. "info", "debug"
    verbose: int | None = None  # 0-4, takes precedence over level
    file: str | None = None


@dataclass
class Config:
    """antx configuration."""

    server_url: str | None = None
    api_key: str | None = None
    root_password: str | None = None
    jwt: str | None = None
    debug: bool = False

    client: ClientConfig = field(default_factory=ClientConfig)
    shell: ShellConfig = field(default_factory=ShellConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def state_path(self) -> Path:
        return Path(os.path.expanduser(self.shell.state_file))


def get_user_config_path() -> Path | None:
    """Get the user-level config path (the file may not exist)."""
    if sys.platform == "win32":
        app_data = os.environ.get("APPDATA")
        if app_data:
            return Path(app_data) / APP_NAME / CONFIG_FILENAME
        return None

    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config) / APP_NAME / CONFIG_FILENAME
    return Path.home() / ".config" / APP_NAME / CONFIG_FILENAME


@lru_cache(maxsize=1)
def _load_secrets(secrets_path: Path | None = None) -> dict[str, str | None]:
    """Load and cache the .env.secrets file."""
    path = secrets_path or Path(SECRETS_FILE)
    if path.exists():
        return dotenv_values(path)
    return {}


def fetch_secret(
    key: str,
    default: str | None = None,
    secrets_path: Path | None = None,
) -> str | None:
    """Fetch a secret from the environment, then from .env.secrets.

    Real environment variables take precedence so tests can monkeypatch them.
    """
    value = os.environ.get(key)
    if value is not None:
        return value

    secrets = _load_secrets(secrets_path)
    found = secrets.get(key)
    if found is not None:
        return found
    return default


def load_config(
    config_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Config:
    """Load configuration from file, secrets and CLI overrides.

    Priority (highest last): config file, environment/.env.secrets, overrides.
    Overrides with a value of None are ignored.
    """
    if config_path is None:
        for name in _LOCAL_CONFIG_NAMES:
            if Path(name).exists():
                config_path = Path(name)
                break
        else:
            user_path = get_user_config_path()
            if user_path is not None and user_path.exists():
                config_path = user_path

    config = Config()
    if config_path and config_path.exists():
        config = _load_yaml_config(config_path)

    for attr, key in (
        ("api_key", "ANTX_API_KEY"),
        ("jwt", "ANTX_JWT"),
        ("root_password", "ANTX_ROOT_PASSWORD"),
    ):
        secret = fetch_secret(key)
        if secret:
            setattr(config, attr, secret)

    for key, value in (overrides or {}).items():
        if value is None:
            continue
        if key == "state_file":
            config.shell.state_file = str(value)
        elif key == "verbose":
            if value:
                config.logging.verbose = value
        else:
            setattr(config, key, value)

    return config


def _load_yaml_config(path: Path) -> Config:
    """Load config from a YAML file; invalid files yield defaults."""
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        _log.warning("Invalid YAML in %s: %s", path, e)
        return Config()
    except OSError as e:
        _log.warning("Error reading %s: %s", path, e)
        return Config()

    if not isinstance(data, dict):
        return Config()

    client_data = data.get("client") or {}
    shell_data = data.get("shell") or {}
    logging_data = data.get("logging") or {}

    return Config(
        server_url=data.get("server_url"),
        api_key=data.get("api_key"),
        jwt=data.get("jwt"),
        root_password=data.get("root_password"),
        debug=bool(data.get("debug", False)),
        client=ClientConfig(
            timeout=float(client_data.get("timeout", DEFAULT_TIMEOUT)),
            verify_tls=bool(client_data.get("verify_tls", True)),
        ),
        shell=ShellConfig(
            state_file=shell_data.get("state_file", DEFAULT_STATE_FILE),
            history_size=int(shell_data.get("history_size", DEFAULT_HISTORY_SIZE)),
            prompt=shell_data.get("prompt", ">>> "),
        ),
        logging=LoggingConfig(
            level=logging_data.get("level"),
            verbose=logging_data.get("verbose"),
            file=logging_data.get("file"),
        ),
    )
