"""Core: config, constants, composition, and application bootstrap.

Single place for settings and shared constants.
"""

from gatekeeper.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
