"""
Build context: where the project and its build output live

The host orchestrator describes the build step through environment
variables. Reading them is kept here so the walk itself only ever sees
explicit arguments.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Tuple

from .ignore.constants import DEFAULT_RULE_FILENAMES

SOURCE_DIR_ENV = 'BUILD_SOURCE_DIR'
OUTPUT_DIR_ENV = 'BUILD_OUTPUT_DIR'
RULE_FILES_ENV = 'RERUN_EXCEPT_RULE_FILES'


@dataclass(frozen=True)
class BuildContext:
    """Defaults for one rerun_except call"""
    source_dir: Path
    output_dir: Optional[Path] = None
    rule_filenames: Tuple[str, ...] = DEFAULT_RULE_FILENAMES

    @classmethod
    def from_environ(cls, environ: Optional[Mapping[str, str]] = None) -> 'BuildContext':
        """
        Build a context from environment variables

        Args:
            environ: Mapping to read, os.environ if None

        Returns:
            BuildContext; the source directory falls back to the current
            working directory and the output directory to None
        """
        if environ is None:
            environ = os.environ

        source = environ.get(SOURCE_DIR_ENV)
        output = environ.get(OUTPUT_DIR_ENV)

        rule_filenames = DEFAULT_RULE_FILENAMES
        raw_rule_files = environ.get(RULE_FILES_ENV)
        if raw_rule_files:
            names = tuple(n.strip() for n in raw_rule_files.split(',') if n.strip())
            if names:
                rule_filenames = names

        return cls(
            source_dir=Path(source) if source else Path.cwd(),
            output_dir=Path(output) if output else None,
            rule_filenames=rule_filenames,
        )
