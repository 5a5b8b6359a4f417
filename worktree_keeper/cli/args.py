"""Command-line argument parsing for worktree-keeper."""

import argparse
from typing import List, Optional

from worktree_keeper.__version__ import __version__
from worktree_keeper.config import OUTPUT_FORMATS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="worktree-keeper",
        description="List git worktrees with their status and remove them without losing work",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument("--version", action="version", version=f"worktree-keeper {__version__}")
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information for troubleshooting"
    )
    parser.add_argument(
        "--main-branch",
        help="Branch to compare against (default: origin/HEAD, main or master)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        metavar="N",
        help="Number of parallel workers for git queries (default: auto-detect based on CPU and threading mode)",
    )
    parser.add_argument(
        "--sequential",
        action="store_true",
        help="Force sequential processing (disable parallelism)",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    list_parser = subparsers.add_parser("list", help="List worktrees (default)")
    list_parser.add_argument(
        "--branches",
        action="store_true",
        help="Also list local branches that have no worktree",
    )
    list_parser.add_argument(
        "--format",
        choices=OUTPUT_FORMATS,
        default="table",
        help="Output format (default: table)",
    )
    list_parser.add_argument(
        "--integration",
        action="store_true",
        help="Check whether each branch is already integrated into the main branch",
    )

    remove_parser = subparsers.add_parser(
        "remove",
        help="Remove worktrees and delete their branches if integrated",
    )
    remove_parser.add_argument(
        "targets",
        nargs="*",
        metavar="TARGET",
        help="Branch name, worktree path, or @ for the current worktree (default: @)",
    )
    remove_parser.add_argument(
        "--force",
        action="store_true",
        help="Remove worktrees even with uncommitted or untracked changes",
    )
    remove_parser.add_argument(
        "--force-delete",
        action="store_true",
        help="Delete branches even if they are not integrated into the main branch",
    )
    remove_parser.add_argument(
        "--no-delete-branch",
        action="store_true",
        help="Keep the branch, only remove the worktree",
    )
    remove_parser.add_argument(
        "--no-background",
        action="store_true",
        help="Wait for the removal to finish instead of running it in the background",
    )

    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments. Without a command, `list` is assumed."""
    parsed = build_parser().parse_args(argv)
    if parsed.command is None:
        parsed.command = "list"
    return parsed
