"""Path safety and input validation."""

import logging
import os
import re
from collections.abc import Iterable
from pathlib import Path

from .constants import (
    DEV_PATH_MARKERS,
    MAX_VARIABLE_NAME_LENGTH,
    MAX_VARIABLE_VALUE_LENGTH,
    VALID_VAR_NAME_PATTERN,
    WORLD_WRITABLE_BIT,
)
from .exceptions import SecurityError, ValidationError

logger = logging.getLogger(__name__)

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B-\x0C\x0E-\x1F\x7F]")


def has_traversal(raw_path: str) -> bool:
    """Check whether any segment of a raw path string is '..'."""
    return ".." in re.split(r"[/\\]", raw_path)


def canonicalize(path: str | os.PathLike) -> str:
    """
    Resolve a path to its canonical absolute form.

    Resolution order:
    1. Symlink-resolve the full path.
    2. Symlink-resolve the parent directory and append the basename.
    3. Lexical absolute path.

    Args:
        path: Path to resolve

    Returns:
        Canonical absolute path as a string
    """
    candidate = Path(path).expanduser()
    try:
        return str(candidate.resolve(strict=True))
    except (OSError, RuntimeError):
        pass

    try:
        return str(candidate.parent.resolve(strict=True) / candidate.name)
    except (OSError, RuntimeError):
        return os.path.abspath(candidate)


def is_within(path: str, base: str | os.PathLike) -> bool:
    """Check whether path equals base or is a proper descendant of it."""
    base = str(base).rstrip("/") or "/"
    prefix = base if base.endswith("/") else base + "/"
    return path == base or path.startswith(prefix)


def is_dev_path(path: str) -> bool:
    """Check whether a path matches a development/test location."""
    return any(marker in path for marker in DEV_PATH_MARKERS)


def validate_and_resolve_path(
    path: str | os.PathLike,
    trusted_bases: Iterable[str | os.PathLike] = (),
    allow_dev_paths: bool = True,
) -> str:
    """
    Validate a path and return its canonical form.

    A '..' segment is a hard failure. A path outside every trusted base
    is only reported as a warning.

    Args:
        path: Raw path supplied by the caller
        trusted_bases: Directories considered safe
        allow_dev_paths: Skip the trusted-base warning for dev/test paths

    Returns:
        Canonical absolute path

    Raises:
        ValidationError: If the path is empty
        SecurityError: If the path contains a traversal segment
    """
    raw = os.fspath(path) if path is not None else ""
    if not raw or not isinstance(raw, str):
        raise ValidationError("Path must be a non-empty string")

    if has_traversal(raw):
        raise SecurityError(f"Path traversal attempt detected: {raw}")

    resolved = canonicalize(raw)

    if allow_dev_paths and is_dev_path(resolved):
        return resolved

    bases = [canonicalize(base) for base in trusted_bases]
    if not any(is_within(resolved, base) for base in bases):
        logger.warning(
            "Path %s is outside trusted directories (%s)",
            raw,
            ", ".join(bases) or "none configured",
        )

    return resolved


def validate_variable_name(name: str) -> None:
    """
    Validate an environment variable name.

    Raises:
        ValidationError: If the name is empty, too long or malformed
    """
    if not name or not isinstance(name, str):
        raise ValidationError("Variable name must be a non-empty string")

    if len(name) > MAX_VARIABLE_NAME_LENGTH:
        raise ValidationError(
            f"Variable name too long: {len(name)} > {MAX_VARIABLE_NAME_LENGTH} characters"
        )

    if not VALID_VAR_NAME_PATTERN.match(name):
        raise ValidationError(
            f"Invalid variable name: {name}\n"
            "Must start with letter or underscore, contain only alphanumeric and underscore"
        )


def validate_variable_value(value: str, max_length: int = MAX_VARIABLE_VALUE_LENGTH) -> None:
    """
    Validate an environment variable value.

    Raises:
        ValidationError: If the value is not a string or is too long
    """
    if not isinstance(value, str):
        raise ValidationError("Variable value must be a string")

    if len(value) > max_length:
        raise ValidationError(f"Variable value too long: {len(value)} > {max_length} characters")


def validate_directory(path: str | os.PathLike) -> Path:
    """
    Validate that a directory exists.

    Returns:
        The directory as a Path

    Raises:
        ValidationError: If the path is missing or not a directory
    """
    if not path:
        raise ValidationError("Directory path must be a non-empty string")

    directory = Path(path)
    if not directory.exists():
        raise ValidationError(f"Directory not found: {directory}")
    if not directory.is_dir():
        raise ValidationError(f"Not a directory: {directory}")
    return directory


def validate_file(path: str | os.PathLike) -> Path:
    """
    Validate that a regular file exists.

    Returns:
        The file as a Path

    Raises:
        ValidationError: If the path is missing or not a file
    """
    if not path:
        raise ValidationError("File path must be a non-empty string")

    file_path = Path(path)
    if not file_path.exists():
        raise ValidationError(f"File not found: {file_path}")
    if not file_path.is_file():
        raise ValidationError(f"Not a file: {file_path}")
    return file_path


def check_file_permissions(path: str | os.PathLike) -> bool:
    """
    Warn when a file is world-writable.

    Returns:
        True if the file is world-writable, False otherwise (including missing files)
    """
    try:
        mode = os.stat(path).st_mode
    except OSError:
        return False

    if mode & WORLD_WRITABLE_BIT:
        logger.warning("File is world-writable: %s (consider: chmod 600 %s)", path, path)
        return True
    return False


def sanitize_output(text: str) -> str:
    """Remove control characters, keeping newlines and tabs."""
    return _CONTROL_CHARS.sub("", str(text))
