"""
Error taxonomy for rerun-except

Every fatal condition derives from RerunExceptError so build scripts can
fail the step with a single except clause. EntryError is not an exception:
unreadable entries are collected on the report and the walk carries on.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class RerunExceptError(Exception):
    """Base class for errors that abort a rerun_except call"""


class PatternError(RerunExceptError):
    """A caller-supplied ignore glob is syntactically invalid"""

    def __init__(self, pattern: str, message: str, index: Optional[int] = None):
        self.pattern = pattern
        self.message = message
        self.index = index
        where = f" (glob #{index})" if index is not None else ""
        super().__init__(f"Invalid ignore glob '{pattern}'{where}: {message}")


class RuleParseError(RerunExceptError):
    """A discovered ignore-rule file is malformed or unreadable"""

    def __init__(self, path: Path, line: int, message: str, pattern: str = ""):
        self.path = Path(path)
        self.line = line
        self.message = message
        self.pattern = pattern
        super().__init__(f"{self.path}:{line}: {message}")


class TraversalError(RerunExceptError):
    """The project root or output directory cannot be accessed at all"""

    def __init__(self, path: Path, message: str):
        self.path = Path(path)
        self.message = message
        super().__init__(f"Cannot traverse {self.path}: {message}")


class SignalIOError(RerunExceptError):
    """Writing a directive to the signal channel failed"""


@dataclass(frozen=True)
class EntryError:
    """A filesystem entry that could not be read during the walk"""
    path: Path
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"
