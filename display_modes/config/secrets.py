"""Secrets file loading.

The secrets file lives next to config.toml, stays out of version control,
and currently holds only ``slack_token``.
"""

import logging
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


def load_secrets(path: Path) -> Optional[Dict[str, Any]]:
    """Load secrets from a TOML file.

    Args:
        path: Path to secrets.toml

    Returns:
        Secrets dict, or None when the file is absent or cannot be read
    """
    if not path.exists():
        return None

    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
        logger.error(f"Error loading secrets file {path}: {e}")
        return None
