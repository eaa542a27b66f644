"""
Public entry point: tell the build orchestrator which files should NOT be
watched, and have it watch everything else under the project root.

Example build script::

    from rerun_except import rerun_except

    rerun_except(["lang_tests/*.lang"])

Given a tree with a ``.gitignore`` ignoring ``target/``, this declares every
file except ``lang_tests/*.lang`` and ``target/**`` as a rebuild trigger.
A new ``lang_tests/test3.lang`` will not cause a rebuild; a new
``build.py`` will.
"""

from pathlib import Path
from typing import Iterable, Optional, TextIO, Union

from .config import BuildContext
from .ignore import build
from .models import RerunReport
from .signals import SignalEmitter
from .utils import get_logger
from .walker import Walker

logger = get_logger(__name__)

PathLike = Union[str, Path]


def collect(globs: Iterable[str] = (),
            root: Optional[PathLike] = None,
            output_dir: Optional[PathLike] = None,
            *,
            context: Optional[BuildContext] = None) -> RerunReport:
    """
    Walk the project and classify every entry, without emitting anything

    Args:
        globs: gitignore-style globs of files that must not trigger a rebuild
        root: Project root (defaults to the build context's source directory)
        output_dir: Build output directory (defaults to the build context's)
        context: Build context supplying defaults; read from the
            environment if None and a default is needed

    Returns:
        RerunReport with tracked files, rule files and entry errors

    Raises:
        PatternError: A glob is malformed; nothing was walked
        RuleParseError: A discovered rule file is malformed
        TraversalError: The root or output directory is unusable
    """
    if context is None:
        context = BuildContext.from_environ()
    if root is None:
        root = context.source_dir
    if output_dir is None:
        output_dir = context.output_dir

    matcher = build(root, globs, context.rule_filenames)
    walker = Walker(matcher.root_path, output_dir, matcher)

    report = RerunReport(root=matcher.root_path)
    report.entries = list(walker)
    report.entry_errors = list(walker.entry_errors)

    logger.info(
        f"Tracking {len(report.tracked_files)} file(s) and "
        f"{len(report.rule_files)} rule file(s) under {report.root}"
        + (f" ({len(report.entry_errors)} unreadable)" if report.entry_errors else "")
    )
    return report


def rerun_except(globs: Iterable[str] = (),
                 root: Optional[PathLike] = None,
                 output_dir: Optional[PathLike] = None,
                 *,
                 stream: Optional[TextIO] = None,
                 context: Optional[BuildContext] = None,
                 relative: bool = False) -> RerunReport:
    """
    Declare every file under the root, except the ignored ones, as a rebuild trigger

    Directives are only written once the whole tree has been walked without
    a fatal error, so a failing call leaves the signal channel untouched
    (except for SignalIOError, which is raised mid-write).

    Args:
        globs: gitignore-style globs of files that must not trigger a rebuild
        root: Project root (defaults to the build context's source directory)
        output_dir: Build output directory (defaults to the build context's)
        stream: Signal channel, sys.stdout if None
        context: Build context supplying defaults
        relative: Write root-relative paths instead of absolute ones

    Returns:
        RerunReport; ``entry_errors`` lists entries that could not be read

    Raises:
        PatternError, RuleParseError, TraversalError, SignalIOError
    """
    report = collect(globs, root, output_dir, context=context)
    emitter = SignalEmitter(stream=stream, root=report.root, relative=relative)
    report.directives_written = emitter.emit(report.entries)
    return report
