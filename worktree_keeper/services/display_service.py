"""Display and formatting service for worktree listings and removal reports"""
import json
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from worktree_keeper.models import BranchInfo, ListItem, RemovalResult, WorktreeInfo
from worktree_keeper.logging_config import get_logger
from worktree_keeper.constants import COLUMNS, CLI_COLORS
from worktree_keeper.formatters import (
    format_age,
    format_ahead_behind,
    format_branch_name,
    format_branch_step,
    format_diff,
    format_status,
    format_upstream,
    format_worktree_step,
    get_row_style_type,
)

console = Console()
logger = get_logger(__name__)


def _plural(count: int, singular: str, plural: str) -> str:
    return f"{count} {singular if count == 1 else plural}"


class DisplayService:
    def __init__(self, verbose: bool = False, debug: bool = False, output: Optional[Console] = None):
        self.verbose = verbose
        self.debug_mode = debug
        self.console = output or console

    def display_items(
        self,
        items: List[ListItem],
        output_format: str = "table",
        current_path: Optional[str] = None,
    ) -> None:
        """Render a listing as a table or as JSON records.

        Args:
            items: Enriched rows, already sorted
            output_format: "table" or "json"
            current_path: Root of the worktree the command runs in, marked in the table
        """
        if output_format == "json":
            self.display_json(items)
            return
        if not items:
            self.console.print("[dim]No worktrees found[/dim]")
            return
        self.display_table(items, current_path)
        self.display_summary(items)
        self.display_branch_errors(items)

    def display_json(self, items: List[ListItem]) -> None:
        # Plain print: rich would wrap and highlight machine-readable output
        print(json.dumps([item.to_dict() for item in items], indent=2))

    def display_table(self, items: List[ListItem], current_path: Optional[str] = None) -> None:
        """Display a table of worktree and branch information."""
        table = Table()

        for col in COLUMNS:
            table.add_column(col.label, max_width=col.width or None)

        for item in items:
            row_style = CLI_COLORS.get(get_row_style_type(item))
            is_branch_only = isinstance(item, BranchInfo)
            path = "" if is_branch_only else item.worktree.path
            working_diff = "" if is_branch_only else format_diff(item.working_tree_diff)
            is_current = current_path is not None and path == current_path

            # Match COLUMNS order: Branch, Status, Working, Main, Main diff, Path, Remote, Age, Message
            table.add_row(
                format_branch_name(item.branch_name, item.is_primary, is_branch_only, is_current),
                format_status(item),
                working_diff,
                format_ahead_behind(item.ahead, item.behind),
                format_diff(item.branch_diff),
                path,
                format_upstream(item.upstream),
                format_age(item.timestamp),
                item.commit.message,
                style=row_style,
            )

        self.console.print(table)

    def display_summary(self, items: List[ListItem]) -> None:
        worktrees = [item for item in items if isinstance(item, WorktreeInfo)]
        with_changes = sum(1 for item in worktrees if item.has_changes)
        ahead = sum(1 for item in items if item.ahead > 0)
        behind = sum(1 for item in items if item.behind > 0)

        parts = [f"Showing {_plural(len(worktrees), 'worktree', 'worktrees')}"]
        branches = len(items) - len(worktrees)
        if branches:
            parts[0] += f" and {_plural(branches, 'branch', 'branches')}"
        if with_changes:
            parts.append(f"{with_changes} with changes")
        if ahead:
            parts.append(f"{ahead} ahead")
        if behind:
            parts.append(f"{behind} behind")
        self.console.print(f"[dim]{', '.join(parts)}[/dim]")

    def display_branch_errors(self, items: List[ListItem]) -> None:
        """Warn about branches whose details could only be partly gathered."""
        for item in items:
            if isinstance(item, BranchInfo) and item.error:
                self.console.print(f"[yellow]Warning: incomplete details for {item.name}: {item.error}[/yellow]")

    def display_removal_results(self, results: List[RemovalResult], output_format: str = "table") -> None:
        """Report each removal target, one line per step."""
        if output_format == "json":
            print(json.dumps([result.to_dict() for result in results], indent=2))
            return

        for result in results:
            if result.error:
                self.console.print(f"[red]{result.target}: {result.error}[/red]")
                continue
            for line in (format_worktree_step(result), format_branch_step(result)):
                if line:
                    self.console.print(line)
            if result.is_partial_failure:
                logger.warning(f"{result.target}: removal only partly succeeded")
