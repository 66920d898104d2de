"""
scan_files.py - File Scanning Module

Lazily walks the tree under the base directory, honouring depth,
hidden-entry, symlink and .gitignore constraints.
"""

from pathlib import Path
from typing import List, Optional, Iterator, Tuple
import logging
import os

import pathspec

from .errors import BaseDirError
from .models_fs import Entry, EntryKind, TraversalConfig


logger = logging.getLogger(__name__)

GITIGNORE_NAME = ".gitignore"
GIT_DIR_NAME = ".git"


class IgnoreRules:
    """Rules of a single .gitignore, scoped to its directory"""

    def __init__(self, directory: Path, lines: List[str], prefix: str = ""):
        # Matched paths are taken relative to directory, then prefixed
        self.directory = directory
        self.prefix = prefix
        self.patterns = [
            p for p in pathspec.GitIgnoreSpec.from_lines(lines).patterns
            if p.include is not None
        ]

    @classmethod
    def load(
        cls,
        directory: Path,
        anchor: Optional[Path] = None,
        prefix: str = ""
    ) -> Optional["IgnoreRules"]:
        """
        Load directory/.gitignore

        Args:
            directory: Directory holding the .gitignore
            anchor: Directory walked paths are relative to (defaults to directory)
            prefix: Position of anchor inside directory, `/`-terminated

        Returns:
            Rules, or None if absent or empty
        """
        ignore_file = directory / GITIGNORE_NAME
        try:
            with open(ignore_file, "r", encoding="utf-8", errors="replace") as f:
                lines = f.read().splitlines()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning("Cannot read %s: %s", ignore_file, e)
            return None

        rules = cls(anchor if anchor is not None else directory, lines, prefix)
        return rules if rules.patterns else None

    def verdict(self, path: Path, is_dir: bool) -> Optional[bool]:
        """
        Check path against these rules

        Returns:
            True if ignored, False if re-included by a negation,
            None if no rule matched
        """
        rel = self.prefix + path.relative_to(self.directory).as_posix()
        if is_dir:
            rel += "/"

        result = None
        for p in self.patterns:
            if p.match_file(rel) is not None:
                result = p.include
        return result


def load_parent_rules(base_dir: Path) -> List[IgnoreRules]:
    """
    .gitignore rules of the directories above base_dir, outermost first

    Only directories inside the enclosing git repository count; outside a
    repository, parents contribute nothing.
    """
    resolved = base_dir.resolve()
    if (resolved / GIT_DIR_NAME).exists():
        return []

    found: List[IgnoreRules] = []
    for parent in resolved.parents:
        prefix = resolved.relative_to(parent).as_posix() + "/"
        rules = IgnoreRules.load(parent, anchor=base_dir, prefix=prefix)
        if rules:
            found.append(rules)
        if (parent / GIT_DIR_NAME).exists():
            found.reverse()
            return found
    return []


def is_ignored(path: Path, is_dir: bool, chain: List[IgnoreRules]) -> bool:
    """Nearest .gitignore with a matching rule decides"""
    for rules in reversed(chain):
        verdict = rules.verdict(path, is_dir)
        if verdict is not None:
            return verdict
    return False


def is_hidden(name: str) -> bool:
    return name.startswith(".")


def _entry_kind(entry: os.DirEntry) -> EntryKind:
    try:
        # Follows symlinks; broken links count as files
        return EntryKind.DIR if entry.is_dir() else EntryKind.FILE
    except OSError:
        return EntryKind.FILE


def _dir_identity(path: Path) -> Optional[Tuple[int, int]]:
    try:
        st = os.stat(path)
    except OSError:
        return None
    return st.st_dev, st.st_ino


def _list_dir(directory: Path) -> List[os.DirEntry]:
    with os.scandir(directory) as it:
        return sorted(it, key=lambda e: e.name)


def check_base_dir(base_dir: Path) -> Path:
    """
    Validate the base directory before traversal

    Raises:
        BaseDirError: Directory missing, not a directory, or unreadable
    """
    base_dir = Path(base_dir)
    if not base_dir.is_dir():
        raise BaseDirError(f"Directory does not exist: {base_dir}")
    try:
        with os.scandir(base_dir):
            pass
    except OSError as e:
        raise BaseDirError(f"Cannot read directory {base_dir}: {e}") from e
    return base_dir


def walk_entries(config: TraversalConfig) -> Iterator[Entry]:
    """
    Walk the tree under config.base_dir

    The base directory is validated eagerly; entries are produced lazily,
    one directory listing at a time (siblings in name order, then their
    subtrees in the same order). The base directory itself is not produced.

    Args:
        config: Traversal constraints

    Returns:
        Generator of Entry

    Raises:
        BaseDirError: Base directory missing or unreadable
    """
    base_dir = check_base_dir(config.base_dir)
    return _walk(base_dir, config)


def _walk(base_dir: Path, config: TraversalConfig) -> Iterator[Entry]:
    max_depth = config.max_depth
    if not config.recursive:
        max_depth = 1 if max_depth is None else min(max_depth, 1)
    min_depth = config.min_depth or 0

    root_chain: List[IgnoreRules] = []
    if config.respect_gitignore:
        root_chain = load_parent_rules(base_dir)
        rules = IgnoreRules.load(base_dir)
        if rules:
            root_chain.append(rules)

    root_id = _dir_identity(base_dir)
    # (directory, depth of its children, ignore chain, ancestor identities)
    stack = [(base_dir, 1, root_chain, (root_id,) if root_id else ())]

    while stack:
        directory, depth, chain, ancestors = stack.pop()
        if max_depth is not None and depth > max_depth:
            continue

        try:
            children = _list_dir(directory)
        except OSError as e:
            logger.warning("Cannot read directory %s: %s", directory, e)
            continue

        pending = []
        for child in children:
            name = child.name
            path = Path(child.path)

            if not config.include_hidden and is_hidden(name):
                continue

            kind = _entry_kind(child)
            is_dir = kind is EntryKind.DIR
            is_link = child.is_symlink()

            if config.respect_gitignore:
                if is_dir and name == GIT_DIR_NAME:
                    continue
                if chain and is_ignored(path, is_dir, chain):
                    logger.debug("Ignored by .gitignore: %s", path)
                    continue

            entry = Entry(path=path, kind=kind, depth=depth, is_symlink=is_link)
            descend = is_dir and (not is_link or config.follow_symlinks)

            if descend:
                identity = _dir_identity(path)
                if identity is not None and identity in ancestors:
                    logger.warning("Symlink loop detected, not descending: %s", path)
                    descend = False

            if depth >= min_depth:
                yield entry

            if descend and (max_depth is None or depth < max_depth):
                child_chain = chain
                if config.respect_gitignore:
                    rules = IgnoreRules.load(path)
                    if rules:
                        child_chain = chain + [rules]
                child_ancestors = ancestors + ((identity,) if identity else ())
                pending.append((path, depth + 1, child_chain, child_ancestors))

        # Reversed so the first sibling is popped first
        stack.extend(reversed(pending))
