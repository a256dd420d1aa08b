"""
Configuration
"""

from .settings import DataBackend, Settings, settings

__all__ = ["DataBackend", "Settings", "settings"]
