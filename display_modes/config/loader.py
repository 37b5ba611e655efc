"""
Configuration loader for display-modes.

Loads config.toml into a validated ModesConfig and merges the Slack token
from the separate secrets file.
"""

import logging
import os
import tomllib
from pathlib import Path
from typing import Optional

from pydantic import SecretStr, ValidationError

from ..errors import ConfigLoadError
from ..models import ModesConfig
from .secrets import load_secrets

logger = logging.getLogger(__name__)


def default_config_dir() -> Path:
    """Return $XDG_CONFIG_HOME/display-modes (defaults to ~/.config/display-modes)."""
    xdg = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg) if xdg else Path.home() / ".config"
    return base / "display-modes"


class ConfigLoader:
    """Loads configuration and secrets from TOML files."""

    def __init__(self, config_dir: Optional[Path] = None, config_path: Optional[Path] = None):
        """
        Initialize configuration loader.

        Args:
            config_dir: Configuration directory (~/.config/display-modes/)
            config_path: Explicit config file, overrides config_dir/config.toml
        """
        self.config_dir = config_dir or default_config_dir()
        self.config_path = config_path or self.config_dir / "config.toml"
        self.secrets_path = self.config_dir / "secrets.toml"

    def load(self) -> ModesConfig:
        """
        Load configuration and merge secrets.

        Returns:
            Validated ModesConfig (defaults when config.toml is absent)

        Raises:
            ConfigLoadError: If the file cannot be parsed or fails validation
        """
        config = self.load_config()
        self.merge_secrets(config)
        return config

    def load_config(self) -> ModesConfig:
        if not self.config_path.exists():
            logger.warning(f"No config file at {self.config_path}, using defaults")
            return ModesConfig()

        try:
            with open(self.config_path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
            raise ConfigLoadError(str(self.config_path), str(e))

        try:
            config = ModesConfig(**data)
        except ValidationError as e:
            raise ConfigLoadError(str(self.config_path), str(e))

        logger.info(
            f"Loaded configuration from {self.config_path} "
            f"(layouts: {', '.join(sorted(config.layouts)) or 'none'})"
        )
        return config

    def merge_secrets(self, config: ModesConfig) -> None:
        """Copy the Slack token from the secrets file into config.

        A missing or unreadable secrets file leaves the integration without
        a token, which disables it silently.
        """
        secrets = load_secrets(self.secrets_path)
        token = secrets.get("slack_token") if secrets else None

        if token:
            config.slack.token = SecretStr(token)
            logger.info("Loaded Slack token from secrets file")
        elif secrets is None:
            logger.info(f"No secrets file found at {self.secrets_path}")

        if config.slack.enabled and not config.slack.has_token:
            logger.warning("Slack integration enabled but no token configured")
