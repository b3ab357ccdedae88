"""Configuration loading for AlertDesk.

Settings come from ``~/.config/alertdesk/config.toml`` with environment
variables taking precedence.
"""

import logging
import os
from pathlib import Path
from typing import Optional

import toml
from pydantic import BaseModel, Field

from alertdesk.errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "alertdesk"
CONFIG_PATH = CONFIG_DIR / "config.toml"

DEFAULT_BASE_URL = "https://alert-backend-i0wx.onrender.com"


class RemoteSettings(BaseModel):
    """Where the alert service lives."""

    base_url: str = Field(default=DEFAULT_BASE_URL, min_length=1, description="Alert service base URL")
    timeout: float = Field(default=7.0, gt=0, description="Request timeout in seconds")


class NotificationSettings(BaseModel):
    """Status banner behaviour."""

    delay_seconds: float = Field(default=2.0, gt=0, description="Seconds before a banner hides")


class Settings(BaseModel):
    """All AlertDesk settings."""

    remote: RemoteSettings = Field(default_factory=RemoteSettings)
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)


def load_settings(config_path: Optional[Path] = None) -> Settings:
    """Load settings from the config file and environment.

    Args:
        config_path: Config file to read. Defaults to CONFIG_PATH.

    Returns:
        Settings with defaults for anything not configured.

    Raises:
        ConfigError: If the file exists but cannot be parsed.
    """
    path = config_path or CONFIG_PATH
    data: dict = {}

    if path.exists():
        try:
            data = toml.load(path)
        except (toml.TomlDecodeError, OSError) as e:
            raise ConfigError(f"Could not read {path}: {e}") from e
        logger.debug("Loaded config from %s", path)

    remote = dict(data.get("remote", {}))
    if os.environ.get("ALERTDESK_BASE_URL"):
        remote["base_url"] = os.environ["ALERTDESK_BASE_URL"]
    if os.environ.get("ALERTDESK_TIMEOUT"):
        remote["timeout"] = os.environ["ALERTDESK_TIMEOUT"]

    try:
        return Settings(remote=remote, notifications=data.get("notifications", {}))
    except ValueError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def create_template_config(config_path: Optional[Path] = None) -> Path:
    """Write a starter config file and return its path."""
    path = config_path or CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)

    template = {
        "remote": {
            "base_url": DEFAULT_BASE_URL,
            "timeout": 7.0,
        },
        "notifications": {
            "delay_seconds": 2.0,
        },
    }

    with open(path, "w") as f:
        toml.dump(template, f)

    return path
