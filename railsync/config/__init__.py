"""
Configuration module exports.
"""

from railsync.config.settings import ConfigManager, Settings, get_config, get_settings

__all__ = [
    "Settings",
    "ConfigManager",
    "get_settings",
    "get_config",
]
