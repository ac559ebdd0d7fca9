"""Pytest bootstrap and shared fixtures.

The ``pytest`` console script can run with a sys.path that excludes the
repository root. Ensure ``import synchpath`` and ``import main`` resolve
to the local sources.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest


PROJECT_ROOT = Path(__file__).resolve().parent.parent
PROJECT_ROOT_STR = str(PROJECT_ROOT)

if PROJECT_ROOT_STR not in sys.path:
    sys.path.insert(0, PROJECT_ROOT_STR)


def write_file(path: Path, content: str = "", mtime: float | None = None) -> Path:
    """Create a file (and its parents) and optionally set its mtime."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    if mtime is not None:
        os.utime(path, (mtime, mtime))
    return path


def snapshot(root: Path) -> dict[str, str]:
    """Relative path -> content ("<dir>" for directories), links not followed."""
    result = {}
    for path in sorted(root.rglob("*")):
        relative = path.relative_to(root).as_posix()
        if path.is_symlink():
            result[relative] = f"<link {os.readlink(path)}>"
        elif path.is_dir():
            result[relative] = "<dir>"
        else:
            result[relative] = path.read_text(encoding="utf-8")
    return result


@pytest.fixture
def trees(tmp_path: Path) -> tuple[Path, Path]:
    """An empty source and target directory."""
    source = tmp_path / "source"
    target = tmp_path / "target"
    source.mkdir()
    target.mkdir()
    return source, target


@pytest.fixture
def qapp():
    """A QCoreApplication for signal delivery in worker tests."""
    from PyQt6.QtCore import QCoreApplication

    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    return app
