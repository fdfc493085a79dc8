"""
Core domain exceptions.

These exceptions are transport-agnostic and should be caught by the CLI
layer to convert into an error message and a process exit status.
"""

from .constants import ExitCode


class VarsetError(Exception):
    """Base exception for all varset errors."""

    exit_code = ExitCode.GENERAL_ERROR

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ValidationError(VarsetError):
    """Raised for malformed input the caller controls."""

    exit_code = ExitCode.VALIDATION_ERROR


class SecurityError(VarsetError):
    """Raised when a path traversal attempt is detected."""

    exit_code = ExitCode.SECURITY_ERROR


class PermissionDeniedError(VarsetError):
    """Raised when a command exists but cannot be executed."""

    exit_code = ExitCode.PERMISSION_ERROR


class NotFoundError(VarsetError):
    """Raised when a requested resource is not found."""

    exit_code = ExitCode.COMMAND_NOT_FOUND

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")


def format_error(error: BaseException) -> str:
    """Format an error for user-facing output."""
    return str(error) or error.__class__.__name__


def get_exit_code(error: BaseException) -> int:
    """Get the process exit status for an error."""
    if isinstance(error, VarsetError):
        return error.exit_code
    return ExitCode.GENERAL_ERROR
