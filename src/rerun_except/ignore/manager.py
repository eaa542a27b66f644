"""
Layered ignore matcher: caller globs plus rule files discovered while walking
"""

import enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Union

from .constants import CALLER_SOURCE, DEFAULT_RULE_FILENAMES, VCS_EXCLUDE_FILE
from .file_loader import IgnoreFileInfo, IgnoreFileLoader
from .rule_engine import IgnoreRuleEngine, MatchResult, RuleLevel, RuleOrigin, RuleSection
from ..errors import PatternError, RuleParseError
from ..utils import get_logger

logger = get_logger(__name__)

# Section ranks within the root level. Later ranks override earlier ones.
_RANK_VCS_EXCLUDE = 0
_RANK_RULE_FILE = 1
_RANK_CALLER = 1000


class Classification(enum.Enum):
    KEPT = "kept"
    IGNORED = "ignored"


class IgnoreMatcher:
    """
    Precedence-ordered ignore rules for one project root

    Caller globs are fixed at construction and sit at root level, after the
    root's own rule files. Rule files are added as the walker discovers
    them; each applies to its own directory's subtree and overrides every
    level above it.
    """

    def __init__(self,
                 root: Union[str, Path],
                 explicit_patterns: Sequence[str] = (),
                 rule_filenames: Sequence[str] = DEFAULT_RULE_FILENAMES):
        """
        Initialize the matcher

        Args:
            root: Root directory; caller globs are relative to it
            explicit_patterns: Ordered gitignore-style globs to exclude
            rule_filenames: Names of per-directory ignore-rule files

        Raises:
            PatternError: If any explicit pattern is malformed
        """
        self.root_path = Path(root).resolve()
        self.rule_filenames = tuple(rule_filenames)
        self._rule_engine = IgnoreRuleEngine()
        self._file_loader = IgnoreFileLoader(self._rule_engine)
        self._levels: Dict[Path, RuleLevel] = {}
        self._rule_files: List[Path] = []

        if isinstance(explicit_patterns, str):
            raise TypeError("explicit_patterns must be a sequence of strings, not a string")
        self.explicit_patterns = list(explicit_patterns)

        origins = []
        for index, pattern in enumerate(self.explicit_patterns):
            if not isinstance(pattern, str):
                raise PatternError(repr(pattern), "glob must be a string", index)
            if not pattern.strip():
                # Blank, as in a rule file
                continue
            is_valid, error = self._rule_engine.validate_pattern(pattern)
            if not is_valid:
                raise PatternError(pattern, error or "Invalid pattern", index)
            origins.append(RuleOrigin(pattern=pattern, source=CALLER_SOURCE, line=index + 1))

        if origins:
            self._add_section(self.root_path, RuleSection(_RANK_CALLER, CALLER_SOURCE, origins))
            logger.debug(f"Registered {len(origins)} caller glob(s) at {self.root_path}")

    @property
    def rule_files(self) -> List[Path]:
        """Rule files loaded so far, in discovery order"""
        return list(self._rule_files)

    @property
    def vcs_exclude_file(self) -> Path:
        return self.root_path / VCS_EXCLUDE_FILE

    def is_rule_file(self, path: Union[str, Path]) -> bool:
        """True if ``path`` names an ignore-rule file this matcher honours"""
        path = Path(path)
        return path.name in self.rule_filenames or path == self.vcs_exclude_file

    def add_rule_file(self, file_path: Union[str, Path]) -> IgnoreFileInfo:
        """
        Parse a rule file and layer its rules onto its directory

        Args:
            file_path: Absolute path of a rule file under the root

        Returns:
            The loaded file info

        Raises:
            RuleParseError: If the file cannot be read or holds a bad pattern
        """
        file_path = Path(file_path)
        info = self._file_loader.load_file(file_path)

        if info.errors:
            error = info.errors[0]
            raise RuleParseError(file_path, error.line, error.message, error.pattern)

        for warning in info.warnings:
            logger.warning(f"{file_path}:{warning.line}: {warning.message}")

        if file_path == self.vcs_exclude_file:
            level_path = self.root_path
            rank = _RANK_VCS_EXCLUDE
        else:
            level_path = file_path.parent
            try:
                rank = _RANK_RULE_FILE + self.rule_filenames.index(file_path.name)
            except ValueError:
                rank = _RANK_RULE_FILE + len(self.rule_filenames)

        self._add_section(level_path, RuleSection(rank, str(file_path), info.rules))

        if file_path not in self._rule_files:
            self._rule_files.append(file_path)
        logger.debug(f"Loaded {len(info.rules)} rule(s) from {file_path}")
        return info

    def explain(self, path: Union[str, Path], is_dir: bool) -> MatchResult:
        """
        Decide a path and report which rule decided it

        Args:
            path: Path to check, absolute or relative to the root
            is_dir: Whether the path is a directory

        Returns:
            MatchResult naming the deciding pattern, if any
        """
        path = Path(path)
        if not path.is_absolute():
            path = self.root_path / path
        if path == self.root_path:
            return MatchResult(should_ignore=False)
        return self._rule_engine.match_path(path, is_dir, self._levels, self.root_path)

    def is_ignored(self, path: Union[str, Path], is_dir: bool) -> bool:
        """
        Check if a path is ignored by the rules accumulated so far

        Args:
            path: Path to check, absolute or relative to the root
            is_dir: Whether the path is a directory

        Returns:
            True if path should be ignored, False otherwise
        """
        result = self.explain(path, is_dir)
        if result.matched_pattern is not None:
            logger.trace(
                f"Ignore check for {path}: {result.should_ignore} "
                f"(matched: {result.matched_pattern} from {result.source}:{result.line})"
            )
        return result.should_ignore

    def classify(self, path: Union[str, Path], is_dir: bool) -> Classification:
        if self.is_ignored(path, is_dir):
            return Classification.IGNORED
        return Classification.KEPT

    def get_patterns_for_path(self, path: Union[str, Path]) -> List[str]:
        """
        Get all patterns that affect a path

        Returns:
            List of patterns, least specific first
        """
        path = Path(path)
        if not path.is_absolute():
            path = self.root_path / path
        origins = self._rule_engine.get_effective_patterns(path, self._levels, self.root_path)
        return [origin.pattern for origin in origins]

    def _add_section(self, directory: Path, section: RuleSection):
        level = self._levels.get(directory)
        if level is None:
            level = RuleLevel(directory=directory)
            self._levels[directory] = level
        level.add_section(section)


def build(root: Union[str, Path], explicit_patterns: Iterable[str] = (),
          rule_filenames: Optional[Sequence[str]] = None) -> IgnoreMatcher:
    """Validate caller globs and return a matcher ready for a walk"""
    if rule_filenames is None:
        rule_filenames = DEFAULT_RULE_FILENAMES
    if not isinstance(explicit_patterns, str):
        explicit_patterns = list(explicit_patterns)
    return IgnoreMatcher(root, explicit_patterns, rule_filenames)
