"""
Directory walker that streams rebuild-trigger candidates through the matcher
"""

import errno
import os
from pathlib import Path
from typing import Iterator, List, Optional, Union

from .errors import EntryError, TraversalError
from .ignore import IgnoreMatcher, VCS_DIRNAME
from .models import WalkEntry
from .signals import unwritable_reason
from .utils import get_logger

logger = get_logger(__name__)


class Walker:
    """
    Depth-first walk of a project tree, entries sorted by name

    Iterating a Walker starts a fresh traversal; ``entry_errors`` holds the
    non-fatal problems of the most recent one. Rule files found in a
    directory are loaded into the matcher before any of their siblings is
    classified.
    """

    def __init__(self,
                 root: Union[str, Path],
                 output_dir: Optional[Union[str, Path]],
                 matcher: IgnoreMatcher):
        """
        Args:
            root: Project root
            output_dir: Build output directory, never traversed or emitted
            matcher: Ignore rules; rule files found during the walk are
                added to it
        """
        self.root_path = Path(root).resolve()
        self.output_dir = Path(output_dir).resolve() if output_dir is not None else None
        self.matcher = matcher
        self.entry_errors: List[EntryError] = []

    def __iter__(self) -> Iterator[WalkEntry]:
        return self.walk()

    def walk(self) -> Iterator[WalkEntry]:
        """
        Yield tracked files and rule files under the root

        Raises:
            TraversalError: If the root or output directory is unusable
            RuleParseError: If a discovered rule file is malformed
        """
        self.entry_errors = []
        self._check_boundaries()

        exclude_file = self.matcher.vcs_exclude_file
        if exclude_file.is_file():
            self.matcher.add_rule_file(exclude_file)
            yield WalkEntry(exclude_file, True)

        stack = [self.root_path]
        while stack:
            directory = stack.pop()
            entries = self._scan(directory)
            if entries is None:
                continue

            subdirs = []
            for path, is_dir in self._prepare_entries(entries):
                if is_dir is None:
                    yield WalkEntry(path, True)
                    continue

                if is_dir:
                    if path.name == VCS_DIRNAME:
                        logger.debug(f"Skipping version control directory {path}")
                        continue
                    if self.matcher.is_ignored(path, True):
                        logger.debug(f"Pruning ignored directory {path}")
                        continue
                    subdirs.append(path)
                elif not self.matcher.is_ignored(path, False):
                    yield WalkEntry(path, False)

            # Reversed so the first name is popped next
            stack.extend(reversed(subdirs))

    def _prepare_entries(self, entries):
        """
        Classify raw directory entries, loading rule files first

        Yields (path, is_dir) for ordinary entries and (path, None) for
        rule files, in name order.
        """
        ordinary = []
        rule_files = []
        for entry in entries:
            path = Path(entry.path)
            if self._in_output_dir(path):
                logger.debug(f"Pruning output directory entry {path}")
                continue

            reason = unwritable_reason(entry.name)
            if reason is not None:
                self._record(path, reason)
                continue

            try:
                is_dir = entry.is_dir(follow_symlinks=False)
                if entry.is_symlink() and not os.path.exists(path):
                    raise FileNotFoundError(errno.ENOENT, "Broken symbolic link", str(path))
            except OSError as e:
                self._record(path, e.strerror or str(e))
                continue

            if not is_dir and self.matcher.is_rule_file(path):
                rule_files.append(path)
            ordinary.append((path, is_dir))

        rule_order = {name: i for i, name in enumerate(self.matcher.rule_filenames)}
        for path in sorted(rule_files, key=lambda p: rule_order.get(p.name, len(rule_order))):
            self.matcher.add_rule_file(path)

        rule_set = set(rule_files)
        for path, is_dir in ordinary:
            yield path, (None if path in rule_set else is_dir)

    def _scan(self, directory: Path) -> Optional[List[os.DirEntry]]:
        try:
            with os.scandir(directory) as it:
                return sorted(it, key=lambda e: e.name)
        except OSError as e:
            if directory == self.root_path:
                raise TraversalError(directory, str(e)) from e
            self._record(directory, e.strerror or str(e))
            return None

    def _check_boundaries(self):
        if not self.root_path.exists():
            raise TraversalError(self.root_path, "Root does not exist")
        if not self.root_path.is_dir():
            raise TraversalError(self.root_path, "Root is not a directory")
        reason = unwritable_reason(str(self.root_path))
        if reason is not None:
            raise TraversalError(self.root_path, reason)
        if self.output_dir is not None and self.output_dir.exists() and not self.output_dir.is_dir():
            raise TraversalError(self.output_dir, "Output directory is not a directory")
        # Nothing under the root could be tracked
        if self._in_output_dir(self.root_path):
            raise TraversalError(
                self.root_path, f"Root lies inside output directory {self.output_dir}"
            )

    def _in_output_dir(self, path: Path) -> bool:
        if self.output_dir is None:
            return False
        return path == self.output_dir or self.output_dir in path.parents

    def _record(self, path: Path, message: str):
        entry_error = EntryError(path, message)
        self.entry_errors.append(entry_error)
        logger.warning(f"Skipping entry {entry_error}")


def walk(root: Union[str, Path],
         output_dir: Optional[Union[str, Path]],
         matcher: IgnoreMatcher) -> Iterator[WalkEntry]:
    """Lazily yield (path, is_rule_file) for one traversal"""
    return Walker(root, output_dir, matcher).walk()
