"""
Jinx Configuration Package.

Centralized settings for the jinx engine, overridable through JINX_*
environment variables or a .env file.
"""

from config.manager import SettingsManager, settings_manager
from config.types import EngineSettings
from config.log_setup import setup_logging

# Re-export the singleton instance for easy access
settings = settings_manager

__all__ = [
    "SettingsManager",
    "settings_manager",
    "settings",
    "EngineSettings",
    "setup_logging",
]
