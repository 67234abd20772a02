"""
Storage Layer.

This package persists the application's configuration on disk.
"""

from .config_manager import ConfigManager

__all__ = ["ConfigManager"]
