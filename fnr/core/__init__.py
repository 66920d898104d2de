"""
core - fnr Core Module

Provides pattern matching, glob filtering, traversal, rename planning,
interactive approval and execution.
"""

from .errors import (
    FnrError,
    InvalidPattern,
    InvalidRegex,
    BaseDirError,
)

from .models_fs import (
    Entry,
    EntryKind,
    TypeFilter,
    MatchSpec,
    GlobPattern,
    GlobSpec,
    TraversalConfig,
    RenameConfig,
    RenameItem,
    ConflictGroup,
    ExecutionPlan,
    Decision,
    SessionState,
    Outcome,
    OutcomeKind,
    RenameEvent,
)

from .text_match import (
    PatternMatcher,
    Rewrite,
    build_matcher,
    is_valid_filename,
)

from .glob_rules import (
    GlobFilter,
)

from .scan_files import (
    walk_entries,
    check_base_dir,
)

from .sort_rules import (
    sort_for_execution,
    is_ancestor,
)

from .plan_rename import (
    plan_rename,
    build_plan,
    find_matches,
    select_entries,
    ConflictDetector,
)

from .confirm_rename import (
    InteractionController,
    ScriptedDecisionReader,
    parse_key,
)

from .exec_rename import (
    Executor,
    RenameReport,
    run_session,
)

from .safety_checks import (
    check_rename_op,
)

__all__ = [
    # Errors
    "FnrError",
    "InvalidPattern",
    "InvalidRegex",
    "BaseDirError",

    # Data models
    "Entry",
    "EntryKind",
    "TypeFilter",
    "MatchSpec",
    "GlobPattern",
    "GlobSpec",
    "TraversalConfig",
    "RenameConfig",
    "RenameItem",
    "ConflictGroup",
    "ExecutionPlan",
    "Decision",
    "SessionState",
    "Outcome",
    "OutcomeKind",
    "RenameEvent",

    # Matching
    "PatternMatcher",
    "Rewrite",
    "build_matcher",
    "is_valid_filename",
    "GlobFilter",

    # Scanning
    "walk_entries",
    "check_base_dir",

    # Planning
    "sort_for_execution",
    "is_ancestor",
    "plan_rename",
    "build_plan",
    "find_matches",
    "select_entries",
    "ConflictDetector",

    # Interaction and execution
    "InteractionController",
    "ScriptedDecisionReader",
    "parse_key",
    "Executor",
    "RenameReport",
    "run_session",

    # Safety checks
    "check_rename_op",
]
