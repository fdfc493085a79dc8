"""Owner-only JSON object persistence for the permission and profile stores."""

import json
import logging
import os
from pathlib import Path
from typing import Any

from .constants import MAX_FILE_SIZE, PRIVATE_DIR_MODE, PRIVATE_FILE_MODE
from .exceptions import ValidationError
from .validation import check_file_permissions

logger = logging.getLogger(__name__)


def ensure_private_dir(path: Path) -> None:
    """Create a directory (and parents) restricted to the owner."""
    path.mkdir(parents=True, exist_ok=True)
    os.chmod(path, PRIVATE_DIR_MODE)


def read_json_object(path: Path, label: str, max_size: int = MAX_FILE_SIZE) -> dict[str, Any]:
    """
    Read a JSON object from disk.

    A missing file yields an empty dict. A file that is not valid JSON, or
    whose top level is not an object, yields an empty dict and a warning.

    Args:
        path: File to read
        label: Human-readable name used in messages
        max_size: Largest accepted file size in bytes

    Returns:
        Parsed object

    Raises:
        ValidationError: If the file exceeds max_size
    """
    try:
        size = path.stat().st_size
    except FileNotFoundError:
        return {}

    if size > max_size:
        raise ValidationError(f"{label} file too large ({size} bytes, max {max_size} bytes)")

    check_file_permissions(path)

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning("Corrupted %s file %s, starting fresh: %s", label, path, e)
        return {}

    if not isinstance(data, dict):
        logger.warning("Corrupted %s file %s, starting fresh: top level is not an object", label, path)
        return {}

    return data


def write_json_object(path: Path, data: dict[str, Any]) -> None:
    """
    Atomically replace a JSON object on disk with owner-only permissions.

    The parent directory is created with owner-only traversal.
    """
    ensure_private_dir(path.parent)
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        tmp.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
        os.chmod(tmp, PRIVATE_FILE_MODE)
        os.replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
