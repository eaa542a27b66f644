"""
Line-oriented directives for the build orchestrator

The orchestrator reads the build step's standard output. Two directives
exist:

    disable-default-watch
    rebuild-trigger:<path>

The policy line comes first and appears once; every tracked file and rule
file gets one trigger line.
"""

import sys
from pathlib import Path
from typing import Iterable, Optional, TextIO, Union

from .errors import SignalIOError
from .models import WalkEntry
from .utils import get_logger

logger = get_logger(__name__)

DISABLE_DEFAULT_WATCH = "disable-default-watch"
REBUILD_TRIGGER_PREFIX = "rebuild-trigger:"


def format_trigger(path: Union[str, Path]) -> str:
    return f"{REBUILD_TRIGGER_PREFIX}{path}"


def unwritable_reason(name: str) -> Optional[str]:
    """
    Explain why a path component cannot appear in a directive line

    Returns:
        A message, or None if the name is safe to write
    """
    if '\n' in name or '\r' in name:
        return "Name contains a line break"
    try:
        name.encode('utf-8')
    except UnicodeEncodeError:
        return "Name is not valid UTF-8"
    return None


class SignalEmitter:
    """Writes directives to the orchestrator's signal channel"""

    def __init__(self,
                 stream: Optional[TextIO] = None,
                 root: Optional[Union[str, Path]] = None,
                 relative: bool = False):
        """
        Args:
            stream: Signal channel; sys.stdout at emit time if None
            root: Project root, required when relative is True
            relative: Write root-relative POSIX paths instead of absolute ones
        """
        if relative and root is None:
            raise ValueError("relative paths need a root")
        self._stream = stream
        self.root_path = Path(root).resolve() if root is not None else None
        self.relative = relative

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def format_path(self, path: Path) -> str:
        if self.relative:
            return path.relative_to(self.root_path).as_posix()
        return str(path)

    def emit(self, entries: Iterable[WalkEntry]) -> int:
        """
        Write the policy directive then one trigger per entry

        Args:
            entries: Tracked files and rule files, in the order to write them

        Returns:
            Number of directive lines written

        Raises:
            SignalIOError: If the channel rejects a write
        """
        written = 0
        self._write(DISABLE_DEFAULT_WATCH)
        written += 1

        for entry in entries:
            self._write(format_trigger(self.format_path(entry.path)))
            written += 1

        try:
            self.stream.flush()
        except (OSError, ValueError) as e:
            raise SignalIOError(f"Failed to flush signal channel: {e}") from e

        logger.debug(f"Wrote {written} directive(s)")
        return written

    def _write(self, directive: str):
        try:
            self.stream.write(directive + "\n")
        except (OSError, ValueError) as e:
            raise SignalIOError(f"Failed to write directive '{directive}': {e}") from e
