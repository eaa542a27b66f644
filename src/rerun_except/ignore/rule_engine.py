"""
Rule engine for pattern compilation and matching with multi-level support
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Dict, Optional, Tuple

import pathspec

from ..utils import get_logger

logger = get_logger(__name__)

# Regex group pathspec sets where a directory pattern consumed a separator
DIR_MARK_GROUP = 'ps_d'


@dataclass
class MatchResult:
    """Result of matching a path against ignore rules"""
    should_ignore: bool
    matched_pattern: Optional[str] = None
    source: Optional[str] = None
    line: int = 0
    rule_level: Optional[Path] = None  # Directory whose rules decided


@dataclass
class RuleOrigin:
    """Where a single pattern came from"""
    pattern: str
    source: str
    line: int


@dataclass
class RuleSection:
    """Patterns contributed by one source to a directory level"""
    rank: int
    source: str
    origins: List[RuleOrigin]


@dataclass
class RuleLevel:
    """All rules defined in one directory, compiled lazily"""
    directory: Path
    sections: List[RuleSection] = field(default_factory=list)
    _spec: Optional[pathspec.GitIgnoreSpec] = field(default=None, init=False, repr=False)
    _origins: List[RuleOrigin] = field(default_factory=list, init=False, repr=False)

    def add_section(self, section: RuleSection):
        """Add a section, replacing any earlier one from the same source"""
        self.sections = [s for s in self.sections if s.source != section.source]
        self.sections.append(section)
        self.sections.sort(key=lambda s: s.rank)
        self._spec = None

    @property
    def origins(self) -> List[RuleOrigin]:
        self._ensure_compiled()
        return self._origins

    @property
    def spec(self) -> pathspec.GitIgnoreSpec:
        self._ensure_compiled()
        return self._spec

    def _ensure_compiled(self):
        if self._spec is not None:
            return
        self._origins = [o for s in self.sections for o in s.origins]
        self._spec = pathspec.GitIgnoreSpec.from_lines([o.pattern for o in self._origins])


def find_unclosed_bracket(pattern: str) -> Optional[int]:
    """Return the index of a '[' that never closes, or None"""
    i = 0
    n = len(pattern)
    while i < n:
        c = pattern[i]
        if c == '\\':
            i += 2
            continue
        if c == '[':
            j = i + 1
            if j < n and pattern[j] in '!^':
                j += 1
            # A ']' right after the opening bracket is a literal member
            if j < n and pattern[j] == ']':
                j += 1
            while j < n and pattern[j] != ']':
                if pattern[j] == '\\':
                    j += 1
                j += 1
            if j >= n:
                return i
            i = j + 1
            continue
        i += 1
    return None


def has_trailing_backslash(pattern: str) -> bool:
    """True if the pattern ends in an unescaped backslash"""
    count = len(pattern) - len(pattern.rstrip('\\'))
    return count % 2 == 1


def matches_entry(pattern: pathspec.RegexPattern, rel_path: str, is_dir: bool) -> bool:
    """
    True if ``pattern`` matches the entry at ``rel_path`` itself

    A compiled gitignore pattern also matches every path below a directory
    it names. Under git those descendants are not matched by the pattern,
    so '!build/' re-includes the directory and nothing inside it. Matches
    that only reach ``rel_path`` through a parent directory are discarded.

    Args:
        pattern: Compiled pattern from a GitIgnoreSpec
        rel_path: POSIX path relative to the directory defining the pattern
        is_dir: Whether the entry is a directory
    """
    regex = pattern.regex
    if pattern.include is None or regex is None:
        return False

    if is_dir:
        # 'name/' matches when a directory marker closes the match
        dir_path = rel_path + '/'
        for match in regex.finditer(dir_path):
            if match.groupdict().get(DIR_MARK_GROUP) is not None \
                    and match.end(DIR_MARK_GROUP) == len(dir_path):
                return True

    return any(
        match.groupdict().get(DIR_MARK_GROUP) is None
        for match in regex.finditer(rel_path)
    )


class IgnoreRuleEngine:
    """
    Handles pattern validation and path matching with multi-level precedence
    """

    def validate_pattern(self, pattern: str) -> Tuple[bool, Optional[str]]:
        """
        Validate a single pattern

        Args:
            pattern: Pattern to validate

        Returns:
            Tuple of (is_valid, error_message)
        """
        body = pattern[1:] if pattern.startswith('!') else pattern
        if not body.strip():
            return False, "Empty pattern"

        bracket = find_unclosed_bracket(body)
        if bracket is not None:
            return False, f"Unclosed character class '[' at offset {bracket}"

        if has_trailing_backslash(body):
            return False, "Trailing unescaped backslash"

        try:
            pathspec.GitIgnoreSpec.from_lines([pattern])
        except ValueError as e:
            return False, str(e)
        return True, None

    def match_path(self, path: Path, is_dir: bool, levels: Dict[Path, RuleLevel],
                   base_path: Path) -> MatchResult:
        """
        Match path against the rule levels with precedence

        Levels are consulted from the path's own parent up to ``base_path``.
        Within a level the last pattern matching the path itself decides;
        the first level with a decision wins. Parent directories are assumed
        to be kept, as they are during a walk, so a pattern reaching the
        path only through a parent never decides.

        Args:
            path: Absolute path to check, a descendant of base_path
            is_dir: Whether the path is a directory (enables 'dir/' patterns)
            levels: Compiled rules keyed by the directory defining them
            base_path: Root of the traversal

        Returns:
            MatchResult with decision and matched pattern info
        """
        for directory in self._ancestors(path, base_path):
            level = levels.get(directory)
            if level is None or not level.sections:
                continue

            rel_path = path.relative_to(directory).as_posix()
            patterns = level.spec.patterns
            for index in range(len(patterns) - 1, -1, -1):
                pattern = patterns[index]
                if not matches_entry(pattern, rel_path, is_dir):
                    continue

                origin = level.origins[index]
                return MatchResult(
                    should_ignore=bool(pattern.include),
                    matched_pattern=origin.pattern,
                    source=origin.source,
                    line=origin.line,
                    rule_level=directory,
                )

        return MatchResult(should_ignore=False)

    def get_effective_patterns(self, path: Path, levels: Dict[Path, RuleLevel],
                               base_path: Path) -> List[RuleOrigin]:
        """
        Get all patterns that would apply to a given path

        Returns:
            List of patterns, least specific first
        """
        patterns = []
        for directory in reversed(list(self._ancestors(path, base_path))):
            level = levels.get(directory)
            if level is not None:
                patterns.extend(level.origins)
        return patterns

    @staticmethod
    def _ancestors(path: Path, base_path: Path):
        current = path.parent
        while True:
            yield current
            if current == base_path or current == current.parent:
                break
            current = current.parent
