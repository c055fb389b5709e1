"""Server core: settings and constants."""

from .config import Settings, settings

__all__ = ["Settings", "settings"]
