"""
Central configuration for ignore rule processing
"""

# Rule files honoured in every directory, in load order. Within a directory,
# later files take precedence over earlier ones.
DEFAULT_RULE_FILENAMES = (".gitignore", ".ignore")

# Version control directory: never descended into
VCS_DIRNAME = ".git"

# Repository-wide exclude file, relative to the root. Applies at root level
# with lower precedence than the root's own rule files.
VCS_EXCLUDE_FILE = ".git/info/exclude"

# Source label for caller-supplied globs
CALLER_SOURCE = "<caller>"

# Limits for security and performance
MAX_IGNORE_FILE_SIZE = 1024 * 1024  # 1MB
