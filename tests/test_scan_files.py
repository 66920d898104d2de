"""Tests for filesystem traversal."""

import inspect
import os
from pathlib import Path

import pytest

from fnr.core import BaseDirError, EntryKind, TraversalConfig, walk_entries


def walk(root: Path, **kwargs):
    config = TraversalConfig(base_dir=root, **kwargs)
    return {e.path.relative_to(root).as_posix(): e for e in walk_entries(config)}


@pytest.fixture
def basic_tree(tree):
    return tree(
        "a.txt",
        "sub/b.txt",
        "sub/deep/c.txt",
        ".hidden/h.txt",
        ".dot.txt",
    )


def symlink(target: Path, link: Path) -> None:
    try:
        os.symlink(target, link, target_is_directory=target.is_dir())
    except (OSError, NotImplementedError):
        pytest.skip("symlinks not supported")


class TestWalkEntries:
    """Tests for walk_entries."""

    def test_default_walk(self, basic_tree):
        entries = walk(basic_tree)

        assert set(entries) == {"a.txt", "sub", "sub/b.txt", "sub/deep", "sub/deep/c.txt"}
        assert entries["a.txt"].depth == 1
        assert entries["sub"].kind is EntryKind.DIR
        assert entries["sub/deep/c.txt"].depth == 3
        assert entries["sub/deep/c.txt"].kind is EntryKind.FILE

    def test_is_lazy(self, basic_tree):
        """Test that entries are produced by a generator."""
        assert inspect.isgenerator(walk_entries(TraversalConfig(base_dir=basic_tree)))

    def test_siblings_in_name_order(self, tree):
        root = tree("c", "a", "b")
        names = [e.path.name for e in walk_entries(TraversalConfig(base_dir=root))]
        assert names == ["a", "b", "c"]

    def test_non_recursive(self, basic_tree):
        assert set(walk(basic_tree, recursive=False)) == {"a.txt", "sub"}

    def test_max_depth_prunes_subtree(self, basic_tree):
        assert set(walk(basic_tree, max_depth=2)) == {"a.txt", "sub", "sub/b.txt", "sub/deep"}

    def test_min_depth_still_descends(self, basic_tree):
        assert set(walk(basic_tree, min_depth=2)) == {"sub/b.txt", "sub/deep", "sub/deep/c.txt"}

    def test_min_depth_above_max_depth_is_empty(self, basic_tree):
        assert walk(basic_tree, min_depth=3, max_depth=2) == {}

    def test_hidden(self, basic_tree):
        entries = walk(basic_tree, include_hidden=True)
        assert {".hidden", ".hidden/h.txt", ".dot.txt"} <= set(entries)

    def test_missing_base_dir_fails_eagerly(self, tmp_path):
        with pytest.raises(BaseDirError):
            walk_entries(TraversalConfig(base_dir=tmp_path / "missing"))

    def test_base_dir_must_be_directory(self, tree):
        root = tree("file.txt")
        with pytest.raises(BaseDirError):
            walk_entries(TraversalConfig(base_dir=root / "file.txt"))


class TestGitignore:
    """Tests for .gitignore handling."""

    @pytest.fixture
    def ignored_tree(self, tree):
        root = tree(
            "x.log",
            "keep.log",
            "build/out.txt",
            "src/build",
            "src/main.py",
            "sub/b.txt",
            "sub/c.txt",
            "sub/x.log",
        )
        (root / ".gitignore").write_text("# comment\n*.log\nbuild/\n!keep.log\n")
        (root / "sub" / ".gitignore").write_text("b.txt\n!x.log\n")
        return root

    def test_ignored_entries_pruned(self, ignored_tree):
        entries = walk(ignored_tree)

        assert "x.log" not in entries
        assert "keep.log" in entries
        assert "build" not in entries
        assert "build/out.txt" not in entries
        assert "sub/b.txt" not in entries
        assert "sub/c.txt" in entries

    def test_dir_only_rule_keeps_files(self, ignored_tree):
        """Test that 'build/' does not ignore a file named build."""
        assert "src/build" in walk(ignored_tree)

    def test_nearest_gitignore_decides(self, ignored_tree):
        """Test that a nested negation re-includes a file the root ignores."""
        assert "sub/x.log" in walk(ignored_tree)

    def test_respect_disabled(self, ignored_tree):
        entries = walk(ignored_tree, respect_gitignore=False)
        assert {"x.log", "build", "build/out.txt", "sub/b.txt"} <= set(entries)

    def test_parent_gitignore_applies(self, tree):
        """Test that .gitignore files above the base directory count inside a repository."""
        root = tree(".git/", "proj/foo.log", "proj/foo.txt", "proj/sub/bar.log", "proj/keep/a.txt")
        (root / ".gitignore").write_text("*.log\n/proj/keep/\n")

        entries = walk(root / "proj")

        assert set(entries) == {"foo.txt", "sub"}

    def test_base_gitignore_overrides_parent(self, tree):
        root = tree(".git/", "proj/foo.log", "proj/bar.log")
        (root / ".gitignore").write_text("*.log\n")
        (root / "proj" / ".gitignore").write_text("!foo.log\n")

        entries = walk(root / "proj")

        assert "foo.log" in entries
        assert "bar.log" not in entries

    def test_parent_gitignore_outside_repository(self, tree):
        """Test that parents contribute nothing without an enclosing repository."""
        root = tree("proj/foo.log")
        (root / ".gitignore").write_text("*.log\n")

        assert "foo.log" in walk(root / "proj")

    def test_git_dir_pruned(self, tree):
        root = tree(".git/config", "a.txt")

        assert ".git" not in walk(root, include_hidden=True)
        assert ".git" in walk(root, include_hidden=True, respect_gitignore=False)


class TestSymlinks:
    """Tests for symlink handling."""

    def test_followed(self, tree):
        root = tree("real/b.txt")
        symlink(root / "real", root / "link")

        entries = walk(root)

        assert entries["link"].is_symlink
        assert entries["link"].kind is EntryKind.DIR
        assert "link/b.txt" in entries

    def test_not_followed(self, tree):
        root = tree("real/b.txt")
        symlink(root / "real", root / "link")

        entries = walk(root, follow_symlinks=False)

        assert "link" in entries
        assert "link/b.txt" not in entries

    def test_broken_link_is_file(self, tree):
        root = tree("a.txt")
        symlink(root / "missing", root / "dangling")

        assert walk(root)["dangling"].kind is EntryKind.FILE

    def test_loop_not_reentered(self, tree):
        root = tree("sub/a.txt")
        symlink(root, root / "sub" / "loop")

        entries = walk(root)

        assert "sub/loop" in entries
        assert not any(p.startswith("sub/loop/") for p in entries)
