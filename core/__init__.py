"""
Core business logic package.

This package contains the permission store, the configuration parser, the
profile overlay and the directory-chain loader. The cli package provides the
command-line bindings around these operations.
"""

from .exceptions import (
    NotFoundError,
    PermissionDeniedError,
    SecurityError,
    ValidationError,
    VarsetError,
    format_error,
    get_exit_code,
)
from .loader import EnvLoader, LoadResult, SkipReason, safe_read_file
from .parser import interpolate, parse_config, parse_line
from .permissions import DANGEROUS_ENV_VARS, PermissionEntry, PermissionStore, is_dangerous_variable
from .profiles import ProfileStore, validate_profile_name
from .validation import (
    canonicalize,
    check_file_permissions,
    sanitize_output,
    validate_and_resolve_path,
    validate_directory,
    validate_file,
    validate_variable_name,
    validate_variable_value,
)

__all__ = [
    # Exceptions
    "VarsetError",
    "ValidationError",
    "SecurityError",
    "PermissionDeniedError",
    "NotFoundError",
    "format_error",
    "get_exit_code",
    # Permissions
    "PermissionEntry",
    "PermissionStore",
    "DANGEROUS_ENV_VARS",
    "is_dangerous_variable",
    # Parsing
    "parse_config",
    "parse_line",
    "interpolate",
    # Profiles
    "ProfileStore",
    "validate_profile_name",
    # Loading
    "EnvLoader",
    "LoadResult",
    "SkipReason",
    "safe_read_file",
    # Validation
    "canonicalize",
    "validate_and_resolve_path",
    "validate_variable_name",
    "validate_variable_value",
    "validate_directory",
    "validate_file",
    "check_file_permissions",
    "sanitize_output",
]
