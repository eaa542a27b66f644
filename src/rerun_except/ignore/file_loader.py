"""
File loader for parsing and validating ignore-rule files
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Dict

from .constants import MAX_IGNORE_FILE_SIZE
from .rule_engine import IgnoreRuleEngine, RuleOrigin
from ..utils import get_logger

logger = get_logger(__name__)


@dataclass
class ValidationError:
    """Represents a validation error in an ignore file"""
    line: int
    pattern: str
    message: str


@dataclass
class ValidationWarning:
    """Represents a validation warning in an ignore file"""
    line: int
    pattern: str
    message: str


@dataclass
class IgnoreFileInfo:
    """Information about a loaded ignore file"""
    path: Path
    rules: List[RuleOrigin] = field(default_factory=list)
    errors: List[ValidationError] = field(default_factory=list)
    warnings: List[ValidationWarning] = field(default_factory=list)
    stats: Dict[str, int] = field(default_factory=dict)

    @property
    def patterns(self) -> List[str]:
        return [rule.pattern for rule in self.rules]

    @property
    def is_valid(self) -> bool:
        """Check if file has no errors"""
        return len(self.errors) == 0

    @property
    def has_warnings(self) -> bool:
        """Check if file has warnings"""
        return len(self.warnings) > 0


def parse_rule_line(line: str) -> Optional[str]:
    """
    Reduce one line of an ignore file to its pattern

    Blank lines and comments yield None. Trailing whitespace is dropped
    unless escaped with a backslash.
    """
    line = line.rstrip('\r\n')
    if not line.strip() or line.startswith('#'):
        return None

    stripped = line.rstrip(' \t')
    if len(stripped) < len(line):
        trailing_backslashes = len(stripped) - len(stripped.rstrip('\\'))
        if trailing_backslashes % 2 == 1:
            stripped += line[len(stripped)]
    return stripped


class IgnoreFileLoader:
    """
    Handles loading, parsing, and validating ignore files
    """

    def __init__(self, engine: Optional[IgnoreRuleEngine] = None):
        self._engine = engine or IgnoreRuleEngine()

    def load_file(self, file_path: Path) -> IgnoreFileInfo:
        """
        Load and validate an ignore file

        Problems are recorded on the returned info rather than raised; the
        caller decides whether they are fatal.

        Args:
            file_path: Path to the ignore file

        Returns:
            IgnoreFileInfo with patterns and validation results
        """
        info = IgnoreFileInfo(
            path=file_path,
            stats={
                'total_lines': 0,
                'empty_lines': 0,
                'comment_lines': 0,
                'pattern_lines': 0,
            }
        )

        try:
            file_size = file_path.stat().st_size
        except OSError as e:
            info.errors.append(ValidationError(
                line=0,
                pattern="",
                message=f"Cannot stat file: {e}"
            ))
            return info

        if file_size > MAX_IGNORE_FILE_SIZE:
            info.errors.append(ValidationError(
                line=0,
                pattern="",
                message=f"File too large: {file_size} bytes (max: {MAX_IGNORE_FILE_SIZE})"
            ))
            return info

        try:
            with open(file_path, 'r', encoding='utf-8-sig') as f:
                lines = f.read().splitlines()
        except (OSError, UnicodeDecodeError) as e:
            info.errors.append(ValidationError(
                line=0,
                pattern="",
                message=f"Error reading file: {e}"
            ))
            return info

        info.stats['total_lines'] = len(lines)
        source = str(file_path)

        for line_num, line in enumerate(lines, 1):
            pattern = parse_rule_line(line)
            if pattern is None:
                if line.startswith('#'):
                    info.stats['comment_lines'] += 1
                else:
                    info.stats['empty_lines'] += 1
                continue

            info.stats['pattern_lines'] += 1

            is_valid, validation_msg = self._engine.validate_pattern(pattern)
            if not is_valid:
                info.errors.append(ValidationError(
                    line=line_num,
                    pattern=pattern,
                    message=validation_msg or "Invalid pattern"
                ))
                continue

            info.rules.append(RuleOrigin(pattern=pattern, source=source, line=line_num))

            for warning_msg in self._check_pattern_warnings(pattern):
                info.warnings.append(ValidationWarning(
                    line=line_num,
                    pattern=pattern,
                    message=warning_msg
                ))

        return info

    def _check_pattern_warnings(self, pattern: str) -> List[str]:
        """
        Check pattern for potential issues that aren't errors

        Args:
            pattern: Pattern to check

        Returns:
            List of warning messages
        """
        warnings = []

        # Backslash-separated paths (Windows habit)
        if '\\' in pattern and '/' not in pattern and not pattern.startswith('\\'):
            warnings.append(
                "Pattern contains backslash. Use forward slashes for paths."
            )

        if pattern in ['*', '**', '**/*', '/*']:
            warnings.append(
                "Very broad pattern - no file under this directory will trigger a rebuild"
            )

        return warnings
