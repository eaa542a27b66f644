"""
Ignore rule processing for rerun-except

Supports:
- Caller-supplied gitignore-style globs anchored at the project root
- .gitignore / .ignore files at any directory level, deeper files winning
- The repository-wide .git/info/exclude file
- Negation patterns that re-include earlier exclusions
"""

from .constants import DEFAULT_RULE_FILENAMES, VCS_DIRNAME, VCS_EXCLUDE_FILE
from .manager import Classification, IgnoreMatcher, build
from .rule_engine import IgnoreRuleEngine, MatchResult
from .file_loader import IgnoreFileLoader, IgnoreFileInfo

__all__ = [
    'DEFAULT_RULE_FILENAMES',
    'VCS_DIRNAME',
    'VCS_EXCLUDE_FILE',
    'Classification',
    'IgnoreMatcher',
    'build',
    'IgnoreRuleEngine',
    'MatchResult',
    'IgnoreFileLoader',
    'IgnoreFileInfo',
]
