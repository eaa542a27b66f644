"""Data carried between the walker, the emitter and the caller"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, NamedTuple

from .errors import EntryError


class WalkEntry(NamedTuple):
    """One path the walker keeps: a tracked file or a watched rule file"""
    path: Path
    is_rule_file: bool = False


@dataclass
class RerunReport:
    """Outcome of one rerun_except call"""
    root: Path
    entries: List[WalkEntry] = field(default_factory=list)
    entry_errors: List[EntryError] = field(default_factory=list)
    directives_written: int = 0

    @property
    def tracked_files(self) -> List[Path]:
        return [e.path for e in self.entries if not e.is_rule_file]

    @property
    def rule_files(self) -> List[Path]:
        return [e.path for e in self.entries if e.is_rule_file]

    @property
    def paths(self) -> List[Path]:
        """Every path that became a rebuild trigger, in emission order"""
        return [e.path for e in self.entries]
