"""
Configuration module.

Exports:
    settings: Application settings instance
    get_settings: Function to get settings (for dependency injection)
    split_csv: Helper for comma-separated env values
"""

from config.settings import settings, get_settings, Settings, split_csv

__all__ = [
    "settings",
    "get_settings",
    "Settings",
    "split_csv",
]
