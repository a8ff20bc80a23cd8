"""XDG-compliant path management for filemeta.

Only a configuration directory is needed; filemeta keeps no state or
cache of its own.

XDG default:
- Config: ~/.config/filemeta/
"""

import os
from pathlib import Path

# Application identifier for directory naming
APP_NAME = "filemeta"


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/filemeta/ (or XDG_CONFIG_HOME/filemeta/).
    """
    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        return Path(base) / APP_NAME
    return Path.home() / ".config" / APP_NAME


def get_settings_path() -> Path:
    """Get the default settings file path.

    Returns:
        Path to ~/.config/filemeta/settings.toml.
    """
    return get_config_dir() / "settings.toml"
