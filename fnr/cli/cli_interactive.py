"""
cli_interactive.py - Interactive Terminal Presentation

Renders planned renames with the changed parts highlighted and reads
single-keystroke decisions from the terminal.
"""

import os
import sys
from pathlib import Path
from typing import Iterable, Optional

import readchar
from rich.console import Console
from rich.text import Text

from ..core import (
    ConflictGroup, Decision, Entry, OutcomeKind, RenameEvent, RenameItem,
    RenameReport, parse_key
)
from ..core.models_fs import Span


PROMPT = "Replace filename/dirname? [Y]es/[n]o/[a]ll/[q]uit:"

_ECHO = {
    Decision.APPROVE: "y",
    Decision.SKIP: "n",
    Decision.APPROVE_ALL: "a",
    Decision.QUIT: "q",
}


def make_console(no_color: bool = False, stderr: bool = False) -> Console:
    """Console that never wraps paths"""
    return Console(no_color=no_color, highlight=False, soft_wrap=True, stderr=stderr)


def highlight(name: str, spans: Iterable[Span], style: str = "yellow") -> Text:
    """Base name with spans styled"""
    text = Text(name)
    for start, end in spans:
        text.stylize(style, start, end)
    return text


def _parent_prefix(path: Path) -> str:
    parent = str(path.parent)
    return "" if parent == "." else parent + os.sep


def render_item(item: RenameItem) -> Text:
    """Two-line old/new display"""
    prefix = _parent_prefix(item.source)
    return Text.assemble(
        "    ", prefix, highlight(item.old_name, item.old_spans), "\n",
        " -> ", prefix, highlight(item.new_name, item.new_spans),
    )


def render_entry(entry: Entry, spans: Iterable[Span] = ()) -> Text:
    """Search-mode line: [d] or [f] followed by the path"""
    marker = Text("d", style="bold blue") if entry.is_dir else Text("f", style="bold green")
    return Text.assemble(
        "[", marker, "] ", _parent_prefix(entry.path), highlight(entry.path.name, spans),
    )


class TerminalDecisionReader:
    """Reads one keystroke per decision, no Enter needed"""

    def __init__(self, console: Console):
        self.console = console

    def _read_key(self) -> str:
        if not sys.stdin.isatty():
            # Piped input: first non-blank character, EOF quits. Line
            # endings are separators here, not Enter.
            while True:
                char = sys.stdin.read(1)
                if not char:
                    return "q"
                if not char.isspace():
                    return char
        try:
            return readchar.readkey()
        except KeyboardInterrupt:
            return "q"

    def next_decision(self) -> Decision:
        while True:
            key = self._read_key()
            decision = parse_key(key)
            if decision is not None:
                echo = key if len(key) == 1 and key.isprintable() else _ECHO[decision]
                self.console.print(echo, markup=False)
                return decision


class RenamePresenter:
    """Prints the event stream"""

    def __init__(self, console: Console, err_console: Optional[Console] = None):
        self.console = console
        self.err_console = err_console or console

    def prompt(self, item: RenameItem) -> None:
        self.console.print(render_item(item))
        self.console.print(Text(PROMPT + " ", style="cyan"), end="")

    def on_event(self, event: RenameEvent) -> None:
        item, kind = event.item, event.outcome.kind
        if kind is OutcomeKind.DRY_RUN:
            self.console.print(render_item(item))
        elif kind is OutcomeKind.APPLIED:
            self.console.print(Text.assemble(
                ("Renamed:", "bold cyan"), " ", str(item.source), " ",
                ("->", "bold yellow"), " ", (str(item.target), "bold yellow"),
            ))
        elif kind is OutcomeKind.FAILED:
            self.err_console.print(Text.assemble(
                ("Failed:", "bold red"), f" {item.source} -> {item.target}: {event.outcome.reason}",
            ))

    def conflicts(self, groups: Iterable[ConflictGroup]) -> None:
        for group in groups:
            self.err_console.print(Text.assemble(
                ("Conflict:", "bold red"), f" {group.target} ({group.reason})",
            ))
            for item in group.items:
                self.err_console.print(f"    {item.source}", markup=False)

    def warnings(self, messages: Iterable[str]) -> None:
        for msg in messages:
            self.err_console.print(Text.assemble(("Warning:", "yellow"), " ", msg))

    def summary(self, report: RenameReport) -> None:
        if report.quit:
            self.console.print("Quit, remaining renames not applied.", style="yellow")
        self.console.print(report.summary(), markup=False)
