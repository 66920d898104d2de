"""
plan_rename.py - Rename Plan Generation Module

Responsibilities:
- Filter traversal output (entry type first, then globs)
- Compute target names with the pattern matcher
- Conflict detection (never resolved, the whole group is excluded)
- Output an ordered ExecutionPlan
"""

from pathlib import Path
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Set
from collections import defaultdict
import logging
import os

from .models_fs import (
    ConflictGroup, Entry, EntryKind, ExecutionPlan, RenameConfig, RenameItem,
    TypeFilter, normalize_for_comparison
)
from .glob_rules import GlobFilter
from .safety_checks import same_entry
from .scan_files import walk_entries
from .sort_rules import sort_for_execution
from .text_match import PatternMatcher, build_matcher, is_valid_filename


logger = logging.getLogger(__name__)

DUPLICATE_TARGET = "multiple entries would be renamed to the same name"
TARGET_EXISTS = "target already exists"
TARGET_STAYS = "target is an entry that will not be renamed"
TARGET_DIR_LATER = "target is a directory that is renamed later"
RENAME_CYCLE = "renames form a cycle"


def select_entries(
    entries: Iterable[Entry],
    glob_filter: GlobFilter,
    base_dir: Path,
    entry_type: TypeFilter = TypeFilter.BOTH,
) -> Iterator[Entry]:
    """
    Apply the entry-type filter, then the glob filter

    Args:
        entries: Traversal output
        glob_filter: Compiled glob filter
        base_dir: Directory glob paths are relative to
        entry_type: Entry type filter

    Returns:
        Generator of candidate entries
    """
    for entry in entries:
        if not entry_type.accepts(entry.kind):
            continue
        if not glob_filter.is_candidate(entry.relative_to(base_dir)):
            continue
        yield entry


class ConflictDetector:
    """Conflict detector"""

    def __init__(
        self,
        case_insensitive: bool = True,
        exists: Callable[[Path], bool] = os.path.lexists,
        same_entry: Callable[[Path, Path], bool] = same_entry,
    ):
        """
        Initialize conflict detector

        Args:
            case_insensitive: Whether path comparison ignores case
            exists: Check for an entry already on disk
            same_entry: Whether two paths name the same entry on disk
        """
        self.case_insensitive = case_insensitive
        self.exists = exists
        self.same_entry = same_entry

    def _key(self, path: Path) -> str:
        """Normalize path for comparison"""
        return normalize_for_comparison(str(path), self.case_insensitive)

    def detect(self, candidates: List[RenameItem]):
        """
        Split candidates into schedulable items and conflict groups

        Args:
            candidates: Rename candidates

        Returns:
            (scheduled items, chain ranks, conflict groups)
        """
        conflicts: List[ConflictGroup] = []

        # Same target for several sources
        by_target: Dict[str, List[RenameItem]] = defaultdict(list)
        for item in candidates:
            by_target[self._key(item.target)].append(item)

        scheduled: Set[RenameItem] = set()
        for group in by_target.values():
            if len({i.source for i in group}) > 1:
                conflicts.append(ConflictGroup(group[0].target, list(group), DUPLICATE_TARGET))
            else:
                scheduled.update(group)

        by_source = {self._key(item.source): item for item in candidates}

        def blocker_of(item: RenameItem) -> Optional[RenameItem]:
            target_key = self._key(item.target)
            if target_key == self._key(item.source):
                return None
            return by_source.get(target_key)

        # Targets occupied by entries that stay, until nothing changes
        changed = True
        while changed:
            changed = False
            for item in sorted(scheduled, key=lambda i: str(i.source)):
                blocker = blocker_of(item)
                reason = None
                if blocker is not None:
                    if blocker not in scheduled:
                        reason = TARGET_STAYS
                    elif item.kind is EntryKind.FILE and blocker.kind is EntryKind.DIR:
                        reason = TARGET_DIR_LATER
                elif self.exists(item.target) and not self.same_entry(item.source, item.target):
                    reason = TARGET_EXISTS

                if reason:
                    scheduled.discard(item)
                    conflicts.append(ConflictGroup(item.target, [item], reason))
                    changed = True

            ranks, cycles = self._rank_chains(scheduled, blocker_of)
            for cycle in cycles:
                scheduled.difference_update(cycle)
                conflicts.append(ConflictGroup(cycle[0].target, cycle, RENAME_CYCLE))
                changed = True

        for group in conflicts:
            logger.debug("Conflict on %s (%s): %s", group.target, group.reason,
                         ", ".join(str(i.source) for i in group.items))

        return scheduled, ranks, conflicts

    @staticmethod
    def _rank_chains(scheduled, blocker_of):
        """Rank = number of scheduled renames that must happen first"""
        ranks: Dict[RenameItem, int] = {}
        cycles: List[List[RenameItem]] = []

        for start in sorted(scheduled, key=lambda i: str(i.source)):
            path: List[RenameItem] = []
            seen: Set[RenameItem] = set()
            item = start
            while item is not None and item in scheduled and item not in ranks:
                if item in seen:
                    cycle = path[path.index(item):]
                    cycles.append(cycle)
                    for c in cycle:
                        ranks[c] = 0
                    break
                seen.add(item)
                path.append(item)
                item = blocker_of(item)

            base = ranks.get(item, -1) if item is not None and item in scheduled else -1
            for member in reversed(path):
                if member in ranks:
                    break
                base += 1
                ranks[member] = base

        return ranks, cycles


def plan_rename(
    entries: Iterable[Entry],
    matcher: PatternMatcher,
    glob_filter: Optional[GlobFilter] = None,
    base_dir: Path = Path("."),
    entry_type: TypeFilter = TypeFilter.BOTH,
    case_insensitive: bool = True,
    exists: Callable[[Path], bool] = os.path.lexists,
    same_entry: Callable[[Path, Path], bool] = same_entry,
) -> ExecutionPlan:
    """
    Generate the execution plan

    Args:
        entries: Traversal output (any iterable of Entry)
        matcher: Pattern matcher with a replacement
        glob_filter: Glob filter (None admits everything)
        base_dir: Directory glob paths are relative to
        entry_type: Entry type filter, applied before globs
        case_insensitive: Whether target comparison ignores case
        exists: Check for an entry already on disk
        same_entry: Whether two paths name the same entry on disk

    Returns:
        Execution plan
    """
    plan = ExecutionPlan()
    glob_filter = glob_filter or GlobFilter()

    candidates: List[RenameItem] = []
    for entry in select_entries(entries, glob_filter, base_dir, entry_type):
        rewrite = matcher.rewrite(entry.path.name)

        # Skip if name hasn't changed
        if rewrite is None:
            continue

        # Validate new filename
        valid, error = is_valid_filename(rewrite.new_name)
        if not valid:
            plan.add_warning(f"Skip {entry.path}: {error}")
            continue

        candidates.append(RenameItem(
            source=entry.path,
            target=entry.path.with_name(rewrite.new_name),
            kind=entry.kind,
            depth=entry.depth,
            old_spans=rewrite.old_spans,
            new_spans=rewrite.new_spans,
        ))

    detector = ConflictDetector(case_insensitive, exists=exists, same_entry=same_entry)
    scheduled, ranks, plan.conflicts = detector.detect(candidates)
    plan.items = sort_for_execution(list(scheduled), ranks)

    logger.debug(plan.summary())
    return plan


def build_plan(config: RenameConfig) -> ExecutionPlan:
    """
    Run the whole pre-execution pipeline

    Compiles the matcher and glob filter and validates the base directory
    before any traversal; traversal is fully consumed before returning.

    Raises:
        InvalidPattern, InvalidRegex, BaseDirError
    """
    if config.replacement is None:
        raise ValueError("build_plan requires a replacement")

    matcher = build_matcher(config.match, config.replacement)
    glob_filter = GlobFilter(config.globs)
    entries = walk_entries(config.traversal)

    return plan_rename(
        entries,
        matcher,
        glob_filter,
        base_dir=config.traversal.base_dir,
        entry_type=config.traversal.entry_type,
        case_insensitive=config.case_insensitive_fs,
    )


def find_matches(config: RenameConfig, matcher: Optional[PatternMatcher] = None) -> List[Entry]:
    """
    Search mode: filtered entries whose base name matches the pattern

    Args:
        config: Resolved configuration
        matcher: Compiled matcher to reuse (built from config.match if None)

    Raises:
        InvalidPattern, InvalidRegex, BaseDirError
    """
    if matcher is None:
        matcher = build_matcher(config.match)
    glob_filter = GlobFilter(config.globs)
    entries = walk_entries(config.traversal)

    return [
        entry
        for entry in select_entries(entries, glob_filter, config.traversal.base_dir,
                                    config.traversal.entry_type)
        if matcher.matches(entry.path.name)
    ]
