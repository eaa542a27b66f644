"""
rerun-except: declare rebuild triggers by listing what to ignore

Instead of enumerating the files a build step depends on, enumerate the
ones it does not depend on. Everything else under the project root
(subject to .gitignore-style rule files found in the tree) becomes a
rebuild trigger, so files added later are tracked by default.
"""

from .config import BuildContext
from .core import collect, rerun_except
from .errors import (
    EntryError,
    PatternError,
    RerunExceptError,
    RuleParseError,
    SignalIOError,
    TraversalError,
)
from .ignore import Classification, IgnoreMatcher
from .models import RerunReport, WalkEntry
from .signals import SignalEmitter
from .walker import Walker, walk

__version__ = "0.1.0"

__all__ = [
    'BuildContext',
    'collect',
    'rerun_except',
    'EntryError',
    'PatternError',
    'RerunExceptError',
    'RuleParseError',
    'SignalIOError',
    'TraversalError',
    'Classification',
    'IgnoreMatcher',
    'RerunReport',
    'WalkEntry',
    'SignalEmitter',
    'Walker',
    'walk',
]
