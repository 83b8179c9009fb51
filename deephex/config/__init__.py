"""
Configuration: environment settings and game rule constants.
"""

from .config import Settings, settings

__all__ = ["Settings", "settings"]
