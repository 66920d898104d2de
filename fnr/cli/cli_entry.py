"""
cli_entry.py - CLI Entry Point

Supports:
- Search mode: `fnr PATTERN` lists matching entries
- Rename mode: `fnr PATTERN REPLACEMENT [GLOB...]`
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .. import __version__
from ..core import (
    FnrError, GlobSpec, InteractionController, MatchSpec, RenameConfig,
    TraversalConfig, TypeFilter, Executor, build_matcher, build_plan,
    find_matches, run_session
)
from .cli_interactive import (
    RenamePresenter, TerminalDecisionReader, make_console, render_entry
)

EXIT_FATAL = 2


def create_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser"""
    parser = argparse.ArgumentParser(
        prog="fnr",
        description="Fast file and directory name search and rename tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List entries whose name contains "draft"
  fnr draft

  # Rename interactively, only Rust sources outside target/
  fnr old_name new_name '**/*.rs' '!target/**'

  # Regex with capture groups, preview only
  fnr -r 'test_(.+)' 'spec_$1' --dry-run
"""
    )

    parser.add_argument("pattern", help="Pattern to search for (or old pattern for rename)")
    parser.add_argument("replacement", nargs="?", default=None,
                        help="New pattern for rename (if provided, enables rename mode)")
    parser.add_argument("globs", nargs="*", default=[],
                        help="Glob patterns to match (e.g., '*.rs', '**/*.{h,cpp}', '!target/**')")

    parser.add_argument("--base-dir", "-d", type=str, default=".", help="Base directory to search from")
    parser.add_argument("--regex", "-r", action="store_true", help="Enable regular expression matching")
    parser.add_argument("--type", "-t", type=str, default="both",
                        choices=[t.value for t in TypeFilter], help="Filter by entry type")
    parser.add_argument("--dry-run", action="store_true", help="Show what would be renamed without executing")
    parser.add_argument("--no-interactive", action="store_true", help="Apply all changes without prompts")
    parser.add_argument("--no-recursive", action="store_true", help="Don't search subdirectories")
    parser.add_argument("--case-sensitive", action="store_true", help="Case-sensitive matching")
    parser.add_argument("--hidden", action="store_true", help="Include hidden files and directories")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    parser.add_argument("--no-symlink", action="store_true", help="Don't follow symbolic links")
    parser.add_argument("--no-skip-gitignore", action="store_true", help="Don't skip .gitignore'd entries")
    parser.add_argument("--max-depth", type=int, default=None, help="Maximum depth to search")
    parser.add_argument("--min-depth", type=int, default=None, help="Minimum depth to search")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging on stderr")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser


def config_from_args(args: argparse.Namespace) -> RenameConfig:
    """Build the resolved configuration bundle"""
    return RenameConfig(
        match=MatchSpec(
            pattern=args.pattern,
            regex=args.regex,
            case_sensitive=args.case_sensitive,
        ),
        replacement=args.replacement,
        globs=GlobSpec.from_strings(args.globs),
        traversal=TraversalConfig(
            base_dir=Path(args.base_dir),
            recursive=not args.no_recursive,
            min_depth=args.min_depth,
            max_depth=args.max_depth,
            include_hidden=args.hidden,
            follow_symlinks=not args.no_symlink,
            respect_gitignore=not args.no_skip_gitignore,
            entry_type=TypeFilter(args.type),
        ),
        interactive=not args.no_interactive,
        dry_run=args.dry_run,
    )


def cmd_search(config: RenameConfig, console, err_console) -> int:
    """Handle search mode"""
    try:
        matcher = build_matcher(config.match)
        entries = find_matches(config, matcher)
    except FnrError as e:
        err_console.print(f"Error: {e}", markup=False)
        return EXIT_FATAL

    for entry in entries:
        console.print(render_entry(entry, matcher.spans(entry.path.name)))
    return 0


def cmd_rename(config: RenameConfig, console, err_console, reader=None) -> int:
    """Handle rename mode"""
    try:
        plan = build_plan(config)
    except FnrError as e:
        err_console.print(f"Error: {e}", markup=False)
        return EXIT_FATAL

    presenter = RenamePresenter(console, err_console)
    presenter.warnings(plan.warnings)
    presenter.conflicts(plan.conflicts)

    if not plan.items and not plan.conflicts:
        console.print("No matches found.")
        return 0

    if config.dry_run:
        console.print("Dry run - showing what would be renamed:", style="yellow")

    controller = InteractionController(
        reader or TerminalDecisionReader(console),
        interactive=config.interactive,
        prompt=presenter.prompt,
    )
    report = run_session(plan, controller, Executor(dry_run=config.dry_run), presenter.on_event)
    presenter.summary(report)

    return report.exit_code


def main(argv: Optional[List[str]] = None, reader=None) -> int:
    """Main entry point"""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    config = config_from_args(args)
    console = make_console(args.no_color)
    err_console = make_console(args.no_color, stderr=True)

    if config.replacement is None:
        return cmd_search(config, console, err_console)
    return cmd_rename(config, console, err_console, reader=reader)


if __name__ == "__main__":
    sys.exit(main())
