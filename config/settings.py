"""Settings model built once per process from the environment."""

import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, Field

from .defaults import (
    CONFIG_DIR_ENV,
    CONFIG_DIR_NAME,
    DEFAULT_INTERPOLATION_DEPTH,
    DEFAULT_LOG_LEVEL,
    DEFAULT_TRUSTED_BASES,
    ENVRC_FILENAME,
    HOME_ENV,
    LOG_LEVEL_ENV,
    PERMISSIONS_FILE_NAME,
    PROFILES_FILE_NAME,
    STRICT_PATHS_ENV,
    TRUTHY_VALUES,
)


class Settings(BaseModel):
    """Process-wide configuration passed to the stores and the loader."""

    home_dir: Path = Field(description="Home directory; the upward walk stops here")
    config_dir: Path = Field(description="Directory holding the persisted stores")
    envrc_filename: str = Field(
        default=ENVRC_FILENAME,
        description="Name of the per-directory configuration file",
    )
    trusted_bases: list[Path] = Field(
        default_factory=list,
        description="Directories outside of which paths trigger a warning",
    )
    allow_dev_paths: bool = Field(
        default=True,
        description="Exempt /tmp, /test and dot-directories from the trusted-base warning",
    )
    max_interpolation_depth: int = Field(
        default=DEFAULT_INTERPOLATION_DEPTH,
        ge=1,
        description="Longest ${VAR} reference chain that is resolved",
    )
    log_level: str = Field(default=DEFAULT_LOG_LEVEL, description="Root log level")

    @property
    def permissions_file(self) -> Path:
        return self.config_dir / PERMISSIONS_FILE_NAME

    @property
    def profiles_file(self) -> Path:
        return self.config_dir / PROFILES_FILE_NAME

    @classmethod
    def for_home(cls, home_dir: Path, **overrides) -> "Settings":
        """
        Build settings rooted at the given home directory.

        Args:
            home_dir: Home directory
            **overrides: Field values that replace the derived defaults

        Returns:
            Settings with config_dir and trusted_bases derived from home_dir
        """
        home_dir = Path(home_dir)
        values = {
            "home_dir": home_dir,
            "config_dir": home_dir / ".config" / CONFIG_DIR_NAME,
            "trusted_bases": [home_dir, *(Path(base) for base in DEFAULT_TRUSTED_BASES)],
        }
        values.update(overrides)
        return cls(**values)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """
        Build settings from environment variables.

        Reads HOME, VARSET_CONFIG_DIR, VARSET_STRICT_PATHS and VARSET_LOG_LEVEL.

        Args:
            environ: Environment mapping (defaults to os.environ)

        Returns:
            Settings instance
        """
        if environ is None:
            environ = os.environ

        home = environ.get(HOME_ENV) or str(Path.home())
        overrides = {}
        if environ.get(CONFIG_DIR_ENV):
            overrides["config_dir"] = Path(environ[CONFIG_DIR_ENV]).expanduser()
        if environ.get(STRICT_PATHS_ENV, "").strip().lower() in TRUTHY_VALUES:
            overrides["allow_dev_paths"] = False
        if environ.get(LOG_LEVEL_ENV):
            overrides["log_level"] = environ[LOG_LEVEL_ENV].upper()

        return cls.for_home(Path(home), **overrides)
