"""
Configuration subsystem for display-modes.

Modules:
- loader: Load config.toml into ModesConfig
- secrets: Load the separate, unversioned secrets file
"""

from .loader import ConfigLoader, default_config_dir
from .secrets import load_secrets

__all__ = [
    "ConfigLoader",
    "default_config_dir",
    "load_secrets",
]
