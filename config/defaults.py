"""Default configuration values."""

# Environment variable names
HOME_ENV = "HOME"
CONFIG_DIR_ENV = "VARSET_CONFIG_DIR"
STRICT_PATHS_ENV = "VARSET_STRICT_PATHS"
LOG_LEVEL_ENV = "VARSET_LOG_LEVEL"

DEFAULT_LOG_LEVEL = "WARNING"

# Values of VARSET_STRICT_PATHS that switch the dev-path exemption off
TRUTHY_VALUES = ("1", "true", "yes", "on")

# File locations
ENVRC_FILENAME = ".envrc"
CONFIG_DIR_NAME = "varset"
PERMISSIONS_FILE_NAME = "allowed.json"
PROFILES_FILE_NAME = "profiles.json"

# Trusted base directories besides the home directory
DEFAULT_TRUSTED_BASES = ("/opt", "/tmp")

DEFAULT_INTERPOLATION_DEPTH = 10
