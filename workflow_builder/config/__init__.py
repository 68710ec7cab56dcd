"""Configuration management."""

from workflow_builder.config.settings import (
    DocumentSettings,
    NamingSettings,
    Settings,
    configure_logging,
    get_settings,
)

__all__ = [
    "DocumentSettings",
    "NamingSettings",
    "Settings",
    "configure_logging",
    "get_settings",
]
