"""
Directory-chain loading of configuration files.

Walks from a start directory up to the home directory (or the filesystem
root), loads every allowed configuration file on the way, and merges the
results so that nearer directories override outer ones.
"""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from config.logging_config import log_timing

from .constants import MAX_FILE_SIZE
from .exceptions import ValidationError
from .parser import parse_config
from .permissions import PermissionStore
from .profiles import ProfileStore
from .validation import canonicalize

if TYPE_CHECKING:
    from config import Settings

logger = logging.getLogger(__name__)


def safe_read_file(path: str | os.PathLike, max_size: int = MAX_FILE_SIZE) -> str:
    """
    Read a text file, refusing files over max_size.

    Raises:
        ValidationError: If the file is too large
        OSError: If the file cannot be read
    """
    size = os.stat(path).st_size
    if size > max_size:
        raise ValidationError(f"File too large: {path} ({size} bytes, max {max_size} bytes)")
    return Path(path).read_text(encoding="utf-8")


def directory_identity(path: str | os.PathLike) -> tuple[int, int]:
    """Device and inode of a path, identifying the physical directory."""
    st = os.stat(path)
    return st.st_dev, st.st_ino


class SkipReason(str, Enum):
    """Why a configuration file contributed no variables."""

    MISSING = "missing"
    NOT_ALLOWED = "not_allowed"
    TOO_LARGE = "too_large"
    UNREADABLE = "unreadable"
    INVALID = "invalid"


@dataclass
class LoadResult:
    """Outcome of loading one configuration file."""

    path: Path
    variables: dict[str, str] = field(default_factory=dict)
    skipped: SkipReason | None = None
    detail: str = ""

    @property
    def loaded(self) -> bool:
        return self.skipped is None


class EnvLoader:
    """Loads and merges configuration files for a directory or a directory chain."""

    def __init__(
        self,
        settings: "Settings",
        permissions: PermissionStore | None = None,
        profiles: ProfileStore | None = None,
    ):
        """
        Initialize the loader.

        Args:
            settings: Process settings
            permissions: Permission store (built from settings if omitted)
            profiles: Profile store (built from settings if omitted)
        """
        self.settings = settings
        self.permissions = permissions or PermissionStore(settings)
        self.profiles = profiles or ProfileStore(settings)

    def build_chain(self, start: str | os.PathLike) -> list[Path]:
        """
        List directories from start up to the home directory or root.

        Directories are identified by device and inode so a symlink loop
        ends the walk instead of repeating it.

        Args:
            start: Start directory

        Returns:
            Directories ordered innermost first
        """
        home = canonicalize(self.settings.home_dir)
        current = canonicalize(start)
        chain: list[Path] = []
        visited: set[tuple[int, int]] = set()

        while True:
            try:
                identity = directory_identity(current)
            except OSError:
                break

            if identity in visited:
                logger.debug("Directory already visited, stopping walk: %s", current)
                break
            visited.add(identity)
            chain.append(Path(current))

            if current == home:
                break

            parent = os.path.dirname(current)
            if parent == current:
                break
            current = canonicalize(parent)

        return chain

    def load_file(self, path: Path) -> LoadResult:
        """
        Load one configuration file if it exists and is allowed.

        Failures local to the file are returned as a skip reason. A broken
        permission store is not local to the file and propagates.

        Args:
            path: Configuration file path

        Returns:
            LoadResult with variables or a skip reason
        """
        if not path.is_file():
            return LoadResult(path, skipped=SkipReason.MISSING)

        if not self.permissions.is_allowed(path):
            return LoadResult(path, skipped=SkipReason.NOT_ALLOWED)

        try:
            content = safe_read_file(path)
        except ValidationError as e:
            return LoadResult(path, skipped=SkipReason.TOO_LARGE, detail=str(e))
        except (OSError, UnicodeDecodeError) as e:
            return LoadResult(path, skipped=SkipReason.UNREADABLE, detail=str(e))

        try:
            variables = parse_config(
                content,
                source=str(path),
                max_depth=self.settings.max_interpolation_depth,
            )
        except ValidationError as e:
            return LoadResult(path, skipped=SkipReason.INVALID, detail=str(e))

        return LoadResult(path, variables=variables)

    def load_directory(self, directory: str | os.PathLike) -> list[LoadResult]:
        """
        Load the base file of a directory followed by its active profile overlay.

        Args:
            directory: Directory to load

        Returns:
            Results in merge order (base first, then profile)
        """
        directory = Path(directory)
        results = [self.load_file(directory / self.settings.envrc_filename)]

        profile = self.profiles.get_active(directory)
        if profile:
            results.append(self.load_file(self.profiles.profile_file(directory, profile)))

        return results

    def merge(self, results: list[LoadResult]) -> dict[str, str]:
        """
        Merge results in order; later results override earlier ones.

        Skipped results contribute nothing.
        """
        merged: dict[str, str] = {}
        for result in results:
            if result.loaded:
                merged.update(result.variables)
                continue

            if result.skipped in (SkipReason.MISSING, SkipReason.NOT_ALLOWED):
                logger.debug("Skipping %s: %s", result.path, result.skipped.value)
            else:
                logger.warning("Skipping %s: %s", result.path, result.detail or result.skipped.value)
        return merged

    def load_upward(self, start: str | os.PathLike) -> dict[str, str]:
        """
        Load the merged environment for a directory and all its ancestors.

        Args:
            start: Start directory

        Returns:
            Merged variables, nearer directories winning
        """
        with log_timing(logger, f"Directory walk from {start}"):
            results: list[LoadResult] = []
            for directory in reversed(self.build_chain(start)):
                results.extend(self.load_directory(directory))
            return self.merge(results)

    def load_single(self, directory: str | os.PathLike) -> dict[str, str]:
        """
        Load the environment of exactly one directory, ignoring its ancestors.

        Args:
            directory: Directory to load

        Returns:
            Variables from the directory's base file and profile overlay
        """
        return self.merge(self.load_directory(canonicalize(directory)))
