"""
Permission system for configuration files.

Persists an allow/deny decision per canonical file path; loading is
default-deny.
"""

from .dangerous import DANGEROUS_ENV_VARS, is_dangerous_variable
from .models import PermissionEntry
from .store import PermissionStore

__all__ = [
    # Models
    "PermissionEntry",
    # Functions
    "is_dangerous_variable",
    "DANGEROUS_ENV_VARS",
    # Classes
    "PermissionStore",
]
