"""
Core constants for varset.

This module defines system-wide constants used across the codebase.
No magic constants in code.
"""

import re

# Size limits
MAX_FILE_SIZE = 1024 * 1024  # 1MB - maximum size for .envrc and store files
MAX_PERMISSIONS_ENTRIES = 10000  # bounds load time of the permission store
MAX_VARIABLE_NAME_LENGTH = 255
MAX_VARIABLE_VALUE_LENGTH = 100 * 1024
MAX_PROFILE_NAME_LENGTH = 64
MAX_INTERPOLATION_DEPTH = 10

# Filesystem modes
PRIVATE_DIR_MODE = 0o700
PRIVATE_FILE_MODE = 0o600
WORLD_WRITABLE_BIT = 0o002

# Name patterns
VALID_VAR_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
VALID_PROFILE_NAME_PATTERN = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_-]*$")
VARIABLE_REFERENCE_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")

# Path substrings exempt from the trusted-base warning
DEV_PATH_MARKERS = ("/test", "/tmp", "/.")


class ExitCode:
    """Process exit codes."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    VALIDATION_ERROR = 2
    SECURITY_ERROR = 3
    PERMISSION_ERROR = 126
    COMMAND_NOT_FOUND = 127
