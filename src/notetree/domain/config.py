from __future__ import annotations

"""
Configuration Domain Management.

Default settings for the notes side panel and their JSON persistence in the
user data directory. Stored values are merged over the defaults so that
keys added in newer versions always exist.
"""

import json
import logging
import os
from typing import Any, Dict

from notetree.infra.fs import DEFAULT_NOTES_DIR, get_user_data_dir

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Constants & Defaults
# -----------------------------------------------------------------------------
CONFIG_FILE_NAME = "config.json"
CURRENT_CONFIG_VERSION = "1.0.0"
DEFAULT_TAG_SPLITTER = "/"
DEFAULT_MAX_CONCURRENCY = 32


def get_config_file() -> str:
    return os.path.join(get_user_data_dir(), CONFIG_FILE_NAME)


def get_default_config() -> Dict[str, Any]:
    """
    Generate the default runtime configuration.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        # Notes location
        "notes_path": DEFAULT_NOTES_DIR,

        # Filtering (alternation branches of one regex, matched on names)
        "ignore_patterns": [
            r"^\.",
            r"^node_modules$",
        ],

        # Tree layout
        "hide_files": False,
        "hide_tags": False,
        "tag_splitter": DEFAULT_TAG_SPLITTER,

        # Tag indexing
        "max_concurrency": DEFAULT_MAX_CONCURRENCY,
    }

# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_config(path: str | None = None) -> Dict[str, Any]:
    """
    Load the stored configuration merged over the defaults.

    A missing or corrupted file yields the defaults.

    Args:
        path: Optional explicit config file location.

    Returns:
        Dict[str, Any]: The configuration dictionary (unvalidated).
    """
    config_file = path or get_config_file()
    config = get_default_config()

    if not os.path.exists(config_file):
        logger.debug(f"Config file not found at {config_file}. Using defaults.")
        return config

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load config from {config_file}: {e}. Using defaults.")
        return config

    if not isinstance(data, dict):
        logger.warning("Corrupted config file. Using defaults.")
        return config

    data.pop("version", None)
    config.update(data)
    return config


def save_config(config: Dict[str, Any], path: str | None = None) -> bool:
    """
    Persist the configuration as JSON.

    Args:
        config: The configuration to save.
        path: Optional explicit config file location.

    Returns:
        bool: True if the file was written.
    """
    config_file = path or get_config_file()
    payload = dict(config)
    payload["version"] = CURRENT_CONFIG_VERSION
    try:
        os.makedirs(os.path.dirname(os.path.abspath(config_file)), exist_ok=True)
        with open(config_file, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=4)
    except OSError as e:
        logger.error(f"Failed to save configuration: {e}")
        return False

    logger.debug(f"Configuration saved to {config_file}")
    return True
