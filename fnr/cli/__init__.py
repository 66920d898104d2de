"""
cli - Command Line Interface for fnr
"""

from .cli_entry import main
from .cli_interactive import TerminalDecisionReader, RenamePresenter

__all__ = ["main", "TerminalDecisionReader", "RenamePresenter"]
