"""Active profile storage per directory."""

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from .constants import MAX_FILE_SIZE, MAX_PROFILE_NAME_LENGTH, VALID_PROFILE_NAME_PATTERN
from .exceptions import ValidationError
from .storage import read_json_object, write_json_object
from .validation import canonicalize

if TYPE_CHECKING:
    from config import Settings

logger = logging.getLogger(__name__)


def validate_profile_name(name: str) -> None:
    """
    Validate a profile name.

    Raises:
        ValidationError: If the name is empty, too long or malformed
    """
    if not name or not isinstance(name, str):
        raise ValidationError("Profile name must be a non-empty string")

    if len(name) > MAX_PROFILE_NAME_LENGTH:
        raise ValidationError(
            f"Profile name too long: {len(name)} > {MAX_PROFILE_NAME_LENGTH} characters"
        )

    if not VALID_PROFILE_NAME_PATTERN.match(name):
        raise ValidationError(
            f"Invalid profile name: {name}\n"
            "Must start with letter or underscore, contain only alphanumeric, underscore and hyphen"
        )


class ProfileStore:
    """Maps canonical directory paths to their active profile name."""

    def __init__(self, settings: "Settings"):
        self.settings = settings
        self.path = settings.profiles_file

    def load(self) -> dict[str, str]:
        """
        Load all assignments; missing or corrupt files yield an empty mapping.

        Entries that are not valid profile names are dropped with a warning.
        """
        data = read_json_object(self.path, "Profiles", MAX_FILE_SIZE)
        profiles = {}
        for directory, name in data.items():
            if isinstance(name, str) and VALID_PROFILE_NAME_PATTERN.match(name) \
                    and len(name) <= MAX_PROFILE_NAME_LENGTH:
                profiles[directory] = name
            else:
                logger.warning("Ignoring invalid profile entry for %s: %r", directory, name)
        return profiles

    def save(self, profiles: dict[str, str]) -> None:
        write_json_object(self.path, profiles)

    def get_active(self, directory: str | os.PathLike) -> str | None:
        """
        Get the active profile of a directory.

        Args:
            directory: Directory path

        Returns:
            Profile name, or None if no profile is active
        """
        return self.load().get(canonicalize(directory))

    def set_active(self, directory: str | os.PathLike, name: str) -> str:
        """
        Make a profile active for a directory.

        Args:
            directory: Directory path
            name: Profile name

        Returns:
            The canonical directory path

        Raises:
            ValidationError: If the profile name is invalid
        """
        validate_profile_name(name)
        canonical = canonicalize(directory)
        profiles = self.load()
        profiles[canonical] = name
        self.save(profiles)
        logger.info("Active profile for %s set to %s", canonical, name)
        return canonical

    def clear_active(self, directory: str | os.PathLike) -> bool:
        """
        Clear the active profile of a directory.

        Returns:
            True if a profile was active, False otherwise
        """
        canonical = canonicalize(directory)
        profiles = self.load()
        if canonical not in profiles:
            return False
        del profiles[canonical]
        self.save(profiles)
        logger.info("Cleared active profile for %s", canonical)
        return True

    def all_profiles(self) -> dict[str, str]:
        """Get every directory to profile assignment."""
        return self.load()

    def profile_file(self, directory: str | os.PathLike, name: str) -> Path:
        """Path of the overlay file for a profile in a directory."""
        return Path(directory) / f"{self.settings.envrc_filename}.{name}"
