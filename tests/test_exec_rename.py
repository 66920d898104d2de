"""Tests for rename execution and sessions."""

import os
from pathlib import Path

import pytest

from fnr.core import (
    Decision, EntryKind, ExecutionPlan, Executor, InteractionController, MatchSpec,
    OutcomeKind, RenameConfig, RenameItem, ScriptedDecisionReader, TraversalConfig,
    build_plan, run_session
)

from .conftest import listing


def config_for(root: Path, pattern: str, replacement: str, **kwargs) -> RenameConfig:
    return RenameConfig(
        match=MatchSpec(pattern, case_sensitive=True),
        replacement=replacement,
        traversal=TraversalConfig(base_dir=root),
        **kwargs,
    )


def run(config: RenameConfig, script=()):
    plan = build_plan(config)
    controller = InteractionController(
        ScriptedDecisionReader(script), interactive=config.interactive
    )
    return run_session(plan, controller, Executor(dry_run=config.dry_run))


def file_item(root: Path, old: str, new: str) -> RenameItem:
    return RenameItem(root / old, root / new, EntryKind.FILE, 1)


class TestExecutor:
    """Tests for Executor.execute."""

    def test_applies_rename(self, tree):
        root = tree("foo.txt")
        outcome = Executor().execute(file_item(root, "foo.txt", "bar.txt"), Decision.APPROVE)

        assert outcome.kind is OutcomeKind.APPLIED
        assert (root / "bar.txt").exists()
        assert not (root / "foo.txt").exists()

    def test_skip_leaves_tree(self, tree):
        root = tree("foo.txt")
        before = listing(root)

        outcome = Executor().execute(file_item(root, "foo.txt", "bar.txt"), Decision.SKIP)

        assert outcome.kind is OutcomeKind.SKIPPED
        assert listing(root) == before

    def test_dry_run_does_not_mutate(self, tree):
        root = tree("foo.txt")
        before = listing(root)

        outcome = Executor(dry_run=True).execute(file_item(root, "foo.txt", "bar.txt"), Decision.APPROVE)

        assert outcome.kind is OutcomeKind.DRY_RUN
        assert listing(root) == before

    def test_destination_appeared(self, tree):
        root = tree("foo.txt", "bar.txt")

        outcome = Executor().execute(file_item(root, "foo.txt", "bar.txt"), Decision.APPROVE)

        assert outcome.kind is OutcomeKind.FAILED
        assert outcome.reason == "destination exists"
        assert (root / "foo.txt").read_text() == "foo.txt"
        assert (root / "bar.txt").read_text() == "bar.txt"

    def test_missing_source(self, tree):
        root = tree("other")
        outcome = Executor().execute(file_item(root, "foo.txt", "bar.txt"), Decision.APPROVE)

        assert outcome.kind is OutcomeKind.FAILED
        assert outcome.reason == "source does not exist"

    @pytest.mark.skipif(not hasattr(os, "geteuid") or os.geteuid() == 0,
                        reason="needs a non-root POSIX user")
    def test_permission_denied(self, tree):
        root = tree("locked/foo.txt")
        locked = root / "locked"
        locked.chmod(0o500)
        try:
            item = RenameItem(locked / "foo.txt", locked / "bar.txt", EntryKind.FILE, 2)
            outcome = Executor().execute(item, Decision.APPROVE)
        finally:
            locked.chmod(0o700)

        assert outcome.kind is OutcomeKind.FAILED
        assert outcome.reason == "permission denied"


class TestRunSession:
    """Tests for run_session."""

    def test_non_interactive_renames_nested_tree(self, tree):
        root = tree("foo_dir/foo.txt", "foo_dir/foo_sub/foo_deep.txt", "foo.md", "keep.txt")

        report = run(config_for(root, "foo", "bar", interactive=False))

        assert report.applied_count == 5
        assert report.exit_code == 0
        assert listing(root) == [
            ("bar.md", False),
            ("bar_dir", True),
            ("bar_dir/bar.txt", False),
            ("bar_dir/bar_sub", True),
            ("bar_dir/bar_sub/bar_deep.txt", False),
            ("keep.txt", False),
        ]

    def test_dry_run_leaves_tree_identical(self, tree):
        root = tree("foo_dir/foo.txt", "foo_dir/foo_sub/foo_deep.txt", "foo.md")
        before = listing(root)

        report = run(config_for(root, "foo", "bar", dry_run=True), script="q")

        assert listing(root) == before
        assert report.dry_run_count == 5
        assert all(e.outcome.kind is OutcomeKind.DRY_RUN for e in report.events)

    def test_interactive_skip_approve_quit(self, tree):
        root = tree("foo1", "foo2", "foo3")

        report = run(config_for(root, "foo", "bar"), script="nyq")

        assert [e.decision for e in report.events] == [Decision.SKIP, Decision.APPROVE, Decision.QUIT]
        assert listing(root) == [("bar2", False), ("foo1", False), ("foo3", False)]
        assert report.quit
        assert report.exit_code == 0

    def test_remaining_items_after_quit_are_skipped(self, tree):
        root = tree("foo1", "foo2", "foo3")

        report = run(config_for(root, "foo", "bar"), script="q")

        assert [e.decision for e in report.events] == [Decision.QUIT] * 3
        assert report.skipped_count == 3
        assert listing(root) == [("foo1", False), ("foo2", False), ("foo3", False)]

    def test_failure_does_not_abort(self, tree):
        root = tree("foo1", "foo2")
        plan = ExecutionPlan(items=[
            file_item(root, "gone", "bar0"),
            file_item(root, "foo1", "bar1"),
            file_item(root, "foo2", "bar2"),
        ])

        events = []
        report = run_session(plan, InteractionController(interactive=False), Executor(), events.append)

        assert [e.outcome.kind for e in events] == [
            OutcomeKind.FAILED, OutcomeKind.APPLIED, OutcomeKind.APPLIED,
        ]
        assert report.failed_count == 1
        assert report.failures[0][1] == "source does not exist"
        assert report.exit_code == 1
        assert "Failed: 1" in report.summary()

    def test_conflicts_reported(self, tree):
        root = tree("foo.txt", "bar.txt", "foo.md")

        report = run(config_for(root, "foo", "bar", interactive=False))

        assert report.conflicted_count == 1
        assert report.applied_count == 1
        assert report.exit_code == 1
        assert [e.item.old_name for e in report.events
                if e.outcome.kind is OutcomeKind.CONFLICTED] == ["foo.txt"]
        assert (root / "foo.txt").exists()

    def test_round_trip(self, tree):
        root = tree("foo_dir/foo_a.txt", "foo_dir/sub/foo.txt", "foo.md", "other.txt")
        original = listing(root)

        forward = run(config_for(root, "foo", "bar", interactive=False))
        backward = run(config_for(root, "bar", "foo", interactive=False))

        assert forward.conflicted_count == backward.conflicted_count == 0
        assert forward.applied_count == backward.applied_count == 4
        assert listing(root) == original
