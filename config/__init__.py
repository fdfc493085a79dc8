"""
Configuration module for varset.

Exports the Settings model that is built once at process start and passed
into the permission store, the profile store and the loader.
"""

from .defaults import CONFIG_DIR_ENV, DEFAULT_LOG_LEVEL, HOME_ENV, LOG_LEVEL_ENV, STRICT_PATHS_ENV
from .settings import Settings

__all__ = [
    # Environment variable names
    "HOME_ENV",
    "CONFIG_DIR_ENV",
    "STRICT_PATHS_ENV",
    "LOG_LEVEL_ENV",
    "DEFAULT_LOG_LEVEL",
    # Models
    "Settings",
]
