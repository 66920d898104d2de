"""
exec_rename.py - Rename Execution Module

Responsibilities:
- Walk the plan strictly in order, one decision per item
- Single atomic rename per approved item, failures isolated per item
- dry_run support
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple
import logging
import os

from .confirm_rename import InteractionController
from .models_fs import (
    APPLIED, CONFLICTED, DRY_RUN, SKIPPED, ConflictGroup, Decision, ExecutionPlan,
    Outcome, OutcomeKind, RenameEvent, RenameItem, SessionState
)
from .safety_checks import check_rename_op, describe_os_error


logger = logging.getLogger(__name__)


@dataclass
class RenameReport:
    """Rename session result"""
    events: List[RenameEvent] = field(default_factory=list)
    conflicts: List[ConflictGroup] = field(default_factory=list)

    def _count(self, kind: OutcomeKind) -> int:
        return sum(1 for e in self.events if e.outcome.kind is kind)

    @property
    def applied_count(self) -> int:
        return self._count(OutcomeKind.APPLIED)

    @property
    def dry_run_count(self) -> int:
        return self._count(OutcomeKind.DRY_RUN)

    @property
    def skipped_count(self) -> int:
        return self._count(OutcomeKind.SKIPPED)

    @property
    def failed_count(self) -> int:
        return self._count(OutcomeKind.FAILED)

    @property
    def conflicted_count(self) -> int:
        return sum(len(g) for g in self.conflicts)

    @property
    def failures(self) -> List[Tuple[RenameItem, str]]:
        return [(e.item, e.outcome.reason) for e in self.events
                if e.outcome.kind is OutcomeKind.FAILED]

    @property
    def quit(self) -> bool:
        return any(e.decision is Decision.QUIT for e in self.events)

    @property
    def exit_code(self) -> int:
        return 1 if self.failed_count or self.conflicted_count else 0

    def summary(self) -> str:
        """Generate summary"""
        lines = [
            f"Execution Result:",
            f"  - Renamed: {self.applied_count}",
        ]
        if self.dry_run_count:
            lines.append(f"  - Would rename: {self.dry_run_count}")
        lines += [
            f"  - Skipped: {self.skipped_count}",
            f"  - Conflicted: {self.conflicted_count} ({len(self.conflicts)} groups)",
            f"  - Failed: {self.failed_count}",
        ]
        if self.failed_count:
            lines.append("Failure Details:")
            for item, error in self.failures[:10]:  # Show at most 10
                lines.append(f"  - {item.old_name} -> {item.new_name}: {error}")
            if self.failed_count > 10:
                lines.append(f"  ... and {self.failed_count - 10} more failures")
        return "\n".join(lines)


class Executor:
    """Applies approved renames, or simulates them in dry-run mode"""

    def __init__(self, dry_run: bool = False):
        self.dry_run = dry_run

    def execute(self, item: RenameItem, decision: Decision) -> Outcome:
        """
        Apply one decision

        Args:
            item: Planned rename
            decision: Decision for the item

        Returns:
            Outcome; filesystem errors become Failed, never raise
        """
        if not decision.approves:
            return SKIPPED

        if self.dry_run:
            return DRY_RUN

        ok, reason = check_rename_op(item.source, item.target)
        if not ok:
            logger.warning("Cannot rename %s -> %s: %s", item.source, item.target, reason)
            return Outcome.failed(reason)

        try:
            os.rename(item.source, item.target)
        except OSError as e:
            reason = describe_os_error(e)
            logger.warning("Rename failed %s -> %s: %s", item.source, item.target, e)
            return Outcome.failed(reason)

        logger.info("Renamed %s -> %s", item.source, item.target)
        return APPLIED


def run_session(
    plan: ExecutionPlan,
    controller: InteractionController,
    executor: Executor,
    progress_callback: Optional[Callable[[RenameEvent], None]] = None
) -> RenameReport:
    """
    Execute the plan in order

    Args:
        plan: Execution plan
        controller: Decision source
        executor: Applies decisions
        progress_callback: Called with each event as soon as it happens

    Returns:
        Session report, including the plan's conflict groups
    """
    report = RenameReport(conflicts=list(plan.conflicts))

    if executor.dry_run and controller.state is SessionState.PROMPTING:
        # Dry run never prompts
        controller.state = SessionState.APPROVE_ALL

    def emit(event: RenameEvent) -> None:
        report.events.append(event)
        if progress_callback:
            progress_callback(event)

    # Conflicted items are never offered for approval
    for group in plan.conflicts:
        for item in group.items:
            emit(RenameEvent(item=item, decision=Decision.SKIP, outcome=CONFLICTED))

    for item in plan.items:
        decision = controller.decide(item)
        emit(RenameEvent(item=item, decision=decision, outcome=executor.execute(item, decision)))

    return report
