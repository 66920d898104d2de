"""
confirm_rename.py - Interactive Approval

Walks the plan one item at a time and obtains a decision per item.
Approve-all and quit are sticky for the rest of the session.
"""

from typing import Callable, Iterable, Optional, Protocol, Union
import logging

from .models_fs import Decision, RenameItem, SessionState


logger = logging.getLogger(__name__)

ENTER_KEYS = ("\r", "\n")
ESC_KEY = "\x1b"
CTRL_C_KEY = "\x03"

_KEY_DECISIONS = {
    "y": Decision.APPROVE,
    "n": Decision.SKIP,
    "a": Decision.APPROVE_ALL,
    "q": Decision.QUIT,
}


def parse_key(key: str) -> Optional[Decision]:
    """
    Map one keystroke to a decision

    Args:
        key: Key as read from the terminal

    Returns:
        Decision, or None for keys that mean nothing
    """
    if key in ENTER_KEYS:
        return Decision.APPROVE
    if key in (ESC_KEY, CTRL_C_KEY):
        return Decision.QUIT
    return _KEY_DECISIONS.get(key.lower())


class DecisionReader(Protocol):
    def next_decision(self) -> Decision:
        ...


class ScriptedDecisionReader:
    """Replays a fixed sequence of keys or decisions; quits when exhausted"""

    def __init__(self, script: Iterable[Union[str, Decision]]):
        self._script = iter(script)
        self.reads = 0

    def next_decision(self) -> Decision:
        for step in self._script:
            decision = step if isinstance(step, Decision) else parse_key(step)
            if decision is not None:
                self.reads += 1
                return decision
        return Decision.QUIT


class InteractionController:
    """Obtains a decision per plan item"""

    def __init__(
        self,
        reader: Optional[DecisionReader] = None,
        interactive: bool = True,
        prompt: Optional[Callable[[RenameItem], None]] = None,
        state: SessionState = SessionState.PROMPTING,
    ):
        """
        Args:
            reader: Decision source, required when interactive
            interactive: False approves every item without prompting
            prompt: Called with the item before each read
            state: Initial session state
        """
        if interactive and reader is None and state is SessionState.PROMPTING:
            raise ValueError("Interactive sessions need a decision reader")
        self.reader = reader
        self.interactive = interactive
        self.prompt = prompt
        self.state = state

    def decide(self, item: RenameItem) -> Decision:
        if self.state is SessionState.ABORTED:
            return Decision.QUIT
        if not self.interactive or self.state is SessionState.APPROVE_ALL:
            return Decision.APPROVE

        if self.prompt:
            self.prompt(item)
        decision = self.reader.next_decision()

        if decision is Decision.APPROVE_ALL:
            self.state = SessionState.APPROVE_ALL
        elif decision is Decision.QUIT:
            self.state = SessionState.ABORTED
            logger.debug("Session aborted at %s", item.source)
        return decision
