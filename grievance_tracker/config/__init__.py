"""
Configuration package.

Exposes the cached application settings.
"""

from grievance_tracker.config.settings import Settings, get_settings, settings

__all__ = ["Settings", "get_settings", "settings"]
