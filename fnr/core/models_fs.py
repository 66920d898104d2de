"""
models_fs.py - Core Data Structure Definitions

Contains:
- Entry: One filesystem entry produced by traversal
- RenameItem: Single planned rename
- ExecutionPlan: Ordered, conflict-free batch of renames
- Decision / SessionState / Outcome: Interaction and execution results
- RenameConfig: Resolved configuration bundle
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, List, Tuple
from enum import Enum
import platform


Span = Tuple[int, int]


class EntryKind(Enum):
    """Entry kind enumeration"""
    FILE = "file"
    DIR = "dir"


class TypeFilter(Enum):
    """Entry type filter"""
    FILE = "file"
    DIR = "dir"
    BOTH = "both"

    def accepts(self, kind: EntryKind) -> bool:
        if self is TypeFilter.BOTH:
            return True
        return self.value == kind.value


class Decision(Enum):
    """Per-item interactive decision"""
    APPROVE = "approve"
    SKIP = "skip"
    APPROVE_ALL = "approve_all"  # Sticky
    QUIT = "quit"                # Sticky

    @property
    def approves(self) -> bool:
        return self in (Decision.APPROVE, Decision.APPROVE_ALL)


class SessionState(Enum):
    """Interaction session state"""
    PROMPTING = "prompting"
    APPROVE_ALL = "approve_all"
    ABORTED = "aborted"


class OutcomeKind(Enum):
    """Per-item execution outcome"""
    APPLIED = "applied"
    SKIPPED = "skipped"
    FAILED = "failed"
    CONFLICTED = "conflicted"
    DRY_RUN = "dry_run"


@dataclass(frozen=True)
class Outcome:
    """Execution outcome, with a reason for failures"""
    kind: OutcomeKind
    reason: str = ""

    @classmethod
    def failed(cls, reason: str) -> "Outcome":
        return cls(OutcomeKind.FAILED, reason)


APPLIED = Outcome(OutcomeKind.APPLIED)
SKIPPED = Outcome(OutcomeKind.SKIPPED)
CONFLICTED = Outcome(OutcomeKind.CONFLICTED)
DRY_RUN = Outcome(OutcomeKind.DRY_RUN)


@dataclass(frozen=True)
class MatchSpec:
    """What to look for in a base name"""
    pattern: str
    regex: bool = False
    case_sensitive: bool = False


@dataclass(frozen=True)
class GlobPattern:
    """One glob pattern; include=False for `!`-negated patterns"""
    pattern: str
    include: bool = True

    @classmethod
    def parse(cls, text: str) -> "GlobPattern":
        """Parse `!pattern` as an exclude"""
        if text.startswith("!"):
            return cls(pattern=text[1:], include=False)
        return cls(pattern=text, include=True)


@dataclass(frozen=True)
class GlobSpec:
    """Ordered include/exclude patterns; empty means match everything"""
    patterns: Tuple[GlobPattern, ...] = ()

    @classmethod
    def from_strings(cls, texts) -> "GlobSpec":
        return cls(patterns=tuple(GlobPattern.parse(t) for t in texts))


@dataclass
class TraversalConfig:
    """Traversal constraints"""
    base_dir: Path = field(default_factory=lambda: Path("."))
    recursive: bool = True
    min_depth: Optional[int] = None   # Inclusive; depth 1 = direct children
    max_depth: Optional[int] = None   # Inclusive
    include_hidden: bool = False
    follow_symlinks: bool = True
    respect_gitignore: bool = True
    entry_type: TypeFilter = TypeFilter.BOTH


@dataclass(frozen=True)
class Entry:
    """Filesystem entry produced by traversal"""
    path: Path
    kind: EntryKind
    depth: int
    is_symlink: bool = False

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIR

    def relative_to(self, base: Path) -> str:
        """Get relative POSIX path string"""
        try:
            return self.path.relative_to(base).as_posix()
        except ValueError:
            return self.path.as_posix()


@dataclass(frozen=True)
class RenameItem:
    """Single rename: base name changes, parent directory never does"""
    source: Path
    target: Path
    kind: EntryKind
    depth: int
    old_spans: Tuple[Span, ...] = ()  # Changed regions in source name
    new_spans: Tuple[Span, ...] = ()  # Inserted regions in target name

    def __post_init__(self):
        if self.source.parent != self.target.parent:
            raise ValueError(f"Rename must not change directory: {self.source} -> {self.target}")

    @property
    def old_name(self) -> str:
        return self.source.name

    @property
    def new_name(self) -> str:
        return self.target.name


@dataclass
class ConflictGroup:
    """Items excluded from the plan because their targets collide"""
    target: Path
    items: List[RenameItem]
    reason: str

    def __len__(self) -> int:
        return len(self.items)


@dataclass
class ExecutionPlan:
    """Ordered rename plan plus what was excluded from it"""
    items: List[RenameItem] = field(default_factory=list)
    conflicts: List[ConflictGroup] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.items)

    @property
    def conflicted_count(self) -> int:
        """Number of items excluded by conflicts"""
        return sum(len(g) for g in self.conflicts)

    def add_warning(self, msg: str) -> None:
        """Add warning"""
        self.warnings.append(msg)

    def summary(self) -> str:
        """Generate summary"""
        lines = [
            f"Rename Plan Summary:",
            f"  - Planned renames: {len(self.items)}",
            f"  - Conflict groups: {len(self.conflicts)} ({self.conflicted_count} entries)",
            f"  - Warnings: {len(self.warnings)}",
        ]
        return "\n".join(lines)


@dataclass(frozen=True)
class RenameEvent:
    """One (item, decision, outcome) step of a session"""
    item: RenameItem
    decision: Decision
    outcome: Outcome


@dataclass
class RenameConfig:
    """Resolved configuration bundle"""
    match: MatchSpec
    replacement: Optional[str] = None  # None selects search mode
    globs: GlobSpec = field(default_factory=GlobSpec)
    traversal: TraversalConfig = field(default_factory=TraversalConfig)
    interactive: bool = True
    dry_run: bool = False

    # Case-insensitive destination comparison (Windows/macOS default to insensitive)
    case_insensitive_fs: bool = field(default_factory=lambda: is_case_insensitive_fs())


def is_case_insensitive_fs() -> bool:
    """Detect if current filesystem is case-insensitive"""
    return platform.system() in ("Windows", "Darwin")


def normalize_for_comparison(name: str, case_insensitive: bool) -> str:
    """Normalize filename for comparison"""
    if case_insensitive:
        return name.casefold()
    return name
