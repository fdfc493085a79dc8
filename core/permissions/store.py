"""Persistent permission storage for configuration files."""

import logging
import os
from typing import TYPE_CHECKING

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..constants import MAX_FILE_SIZE, MAX_PERMISSIONS_ENTRIES
from ..exceptions import SecurityError, ValidationError
from ..storage import read_json_object, write_json_object
from ..validation import validate_and_resolve_path
from .models import PermissionEntry

if TYPE_CHECKING:
    from config import Settings

logger = logging.getLogger(__name__)

_ENTRIES = TypeAdapter(dict[str, PermissionEntry])


class PermissionStore:
    """
    Storage for per-file allow/deny decisions.

    Every operation reads the store from disk and, when it mutates, writes the
    whole store back. Nothing is cached between calls.
    """

    def __init__(self, settings: "Settings"):
        """
        Initialize the permission store.

        Args:
            settings: Process settings (store location and trusted bases)
        """
        self.settings = settings
        self.path = settings.permissions_file

    def resolve(self, path: str | os.PathLike) -> str:
        """
        Validate a path and return the canonical key used by the store.

        Raises:
            SecurityError: If the path contains a traversal segment
        """
        return validate_and_resolve_path(
            path,
            self.settings.trusted_bases,
            allow_dev_paths=self.settings.allow_dev_paths,
        )

    def load(self) -> dict[str, PermissionEntry]:
        """
        Load all entries from disk.

        A missing or corrupt store is treated as empty.

        Returns:
            Mapping of canonical path to entry

        Raises:
            ValidationError: If the file is too large or has too many entries
        """
        data = read_json_object(self.path, "Permissions", MAX_FILE_SIZE)

        if len(data) > MAX_PERMISSIONS_ENTRIES:
            raise ValidationError(
                f"Too many permission entries ({len(data)} > {MAX_PERMISSIONS_ENTRIES})"
            )

        try:
            return _ENTRIES.validate_python(data)
        except PydanticValidationError as e:
            logger.warning("Corrupted permissions file %s, starting fresh: %s", self.path, e)
            return {}

    def save(self, entries: dict[str, PermissionEntry]) -> None:
        """Persist the complete store with owner-only permissions."""
        write_json_object(self.path, {key: entry.model_dump() for key, entry in entries.items()})

    def _set(self, path: str | os.PathLike, allowed: bool) -> str:
        canonical = self.resolve(path)
        entries = self.load()
        entries[canonical] = PermissionEntry(allowed=allowed)
        self.save(entries)
        return canonical

    def grant(self, path: str | os.PathLike) -> str:
        """
        Allow a configuration file to be loaded.

        Args:
            path: Path of the configuration file

        Returns:
            The canonical path that was stored
        """
        canonical = self._set(path, True)
        logger.info("Allowed: %s", canonical)
        return canonical

    def revoke(self, path: str | os.PathLike) -> str:
        """
        Deny a configuration file.

        Args:
            path: Path of the configuration file

        Returns:
            The canonical path that was stored
        """
        canonical = self._set(path, False)
        logger.info("Denied: %s", canonical)
        return canonical

    def is_allowed(self, path: str | os.PathLike) -> bool:
        """
        Check whether a configuration file may be loaded.

        An unsafe path is reported as not allowed rather than raising.
        A path without an entry is not allowed.

        Args:
            path: Path of the configuration file

        Returns:
            True only if an entry exists and allows the file
        """
        try:
            canonical = self.resolve(path)
        except (SecurityError, ValidationError) as e:
            logger.debug("Refusing unsafe path %s: %s", path, e)
            return False

        entry = self.load().get(canonical)
        return entry is not None and entry.allowed

    def get(self, path: str | os.PathLike) -> PermissionEntry | None:
        """Get the entry recorded for a path, if any."""
        return self.load().get(self.resolve(path))

    def entries(self) -> dict[str, PermissionEntry]:
        """Get all entries."""
        return self.load()

    def prune(self) -> int:
        """
        Remove entries whose file no longer exists.

        Returns:
            Number of entries removed
        """
        entries = self.load()
        stale = [path for path in entries if not os.path.exists(path)]

        for path in stale:
            del entries[path]
            logger.debug("Pruned stale entry: %s", path)

        if stale:
            self.save(entries)
            logger.info("Pruned %d stale entries", len(stale))

        return len(stale)
