"""Shared fixtures and helpers for fnr tests."""

from pathlib import Path
from typing import List, Tuple

import pytest

from fnr.core import Entry, EntryKind


def make_tree(root: Path, *paths: str) -> Path:
    """Create files (and directories for paths ending in '/') under root."""
    for rel in paths:
        target = root / rel
        if rel.endswith("/"):
            target.mkdir(parents=True, exist_ok=True)
        else:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(rel)
    return root


def listing(root: Path) -> List[Tuple[str, bool]]:
    """Snapshot of every path under root with its kind."""
    return sorted((p.relative_to(root).as_posix(), p.is_dir()) for p in root.rglob("*"))


def entry(path: str, kind: EntryKind = EntryKind.FILE) -> Entry:
    """Synthetic entry under the base directory 'root'."""
    p = Path(path)
    return Entry(path=p, kind=kind, depth=len(p.parts) - 1)


def dir_entry(path: str) -> Entry:
    return entry(path, EntryKind.DIR)


@pytest.fixture
def tree(tmp_path: Path):
    """Factory building a tree under tmp_path."""

    def _tree(*paths: str) -> Path:
        return make_tree(tmp_path, *paths)

    return _tree
