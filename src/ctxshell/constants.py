"""Application-level constants for ctxshell."""

APP_NAME = "ctxshell"

# User data directory (created in home directory)
USER_DATA_DIR = f"~/.{APP_NAME}"

# Default history file when the config does not name one
DEFAULT_HISTORY_FILE = f"{USER_DATA_DIR}/history"

# Environment variable enabling console tracebacks for unexpected errors
DEBUG_ENV_VAR = "CTXSHELL_DEBUG"
