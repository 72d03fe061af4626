"""
Configuration for SEI credit scoring.

Provider endpoints and limits come from environment variables (optionally a
.env file); get_settings() is the single source of truth for the fetchers.
"""

from seiscore.config.settings import Settings, get_settings  # noqa: F401

__all__ = ["Settings", "get_settings"]
