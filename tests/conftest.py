"""Shared fixtures for building throwaway project trees"""

from pathlib import Path
from typing import Dict, Iterable, List

import pytest


def write_tree(base: Path, files: Dict[str, str]) -> Path:
    """
    Create files under ``base``; keys ending in '/' create empty directories
    """
    for rel, content in files.items():
        path = base / rel
        if rel.endswith('/'):
            path.mkdir(parents=True, exist_ok=True)
            continue
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return base


def relative(paths: Iterable[Path], root: Path) -> List[str]:
    return [p.relative_to(root).as_posix() for p in paths]


@pytest.fixture
def project(tmp_path):
    """Factory writing files under a fresh, resolved project root"""
    root = tmp_path.resolve() / "proj"
    root.mkdir()

    def _make(files: Dict[str, str]) -> Path:
        return write_tree(root, files)

    return _make
