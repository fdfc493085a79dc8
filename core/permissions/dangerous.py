"""Dangerous variable detection."""


# Variables that are never loaded from a configuration file, whatever its
# permission state: dynamic linker hooks, sanitizer preloads, interpreter
# search paths and shell startup hooks.
DANGEROUS_ENV_VARS = frozenset(
    {
        "LD_PRELOAD",
        "LD_LIBRARY_PATH",
        "LD_AUDIT",
        "DYLD_INSERT_LIBRARIES",
        "DYLD_LIBRARY_PATH",
        "DYLD_PRELOAD",
        "ASAN_PRELOAD",
        "UBSAN_PRELOAD",
        "PATH",
        "PYTHONPATH",
        "RUBYLIB",
        "PERL5LIB",
        "NODE_OPTIONS",
        "BASH_ENV",
        "ENV",
    }
)


def is_dangerous_variable(name: str) -> bool:
    """
    Check if a variable name is on the denylist.

    Args:
        name: The variable name to check

    Returns:
        True if the variable must be stripped, False otherwise
    """
    return name in DANGEROUS_ENV_VARS
