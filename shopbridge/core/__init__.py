"""Core: settings for platform access, storage backends and verification."""

from shopbridge.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
