"""Configuration module"""

from .settings import AppSettings, get_settings, settings

__all__ = ["AppSettings", "get_settings", "settings"]
