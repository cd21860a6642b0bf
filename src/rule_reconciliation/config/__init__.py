"""
Configuration management for the rule reconciliation engine.

Handles loading and validation of application settings from JSON files
and environment variables with Pydantic models.
"""

from .settings import Settings, get_settings, reload_settings, load_json_config

__all__ = [
    "Settings",
    "get_settings",
    "reload_settings",
    "load_json_config",
]
