"""
Configuration package for the Menu Lens Backend.
"""

from .settings import (
    Settings,
    Environment,
    LogLevel,
    AuthMode,
    UploadEncoding,
    VisionSettings,
    TranslationApiSettings,
    SecuritySettings,
    UploadSettings,
    PollingSettings,
    settings,
    get_settings,
    reload_settings,
)

__all__ = [
    "Settings",
    "Environment",
    "LogLevel",
    "AuthMode",
    "UploadEncoding",
    "VisionSettings",
    "TranslationApiSettings",
    "SecuritySettings",
    "UploadSettings",
    "PollingSettings",
    "settings",
    "get_settings",
    "reload_settings",
]
