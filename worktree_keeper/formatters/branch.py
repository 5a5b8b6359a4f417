"""Branch name, divergence and diff formatting utilities."""

from worktree_keeper.constants import (
    SYMBOL_AHEAD,
    SYMBOL_BEHIND,
    SYMBOL_BRANCH_ONLY,
    SYMBOL_CURRENT,
    SYMBOL_PRIMARY,
)
from worktree_keeper.models import DiffTotals, UpstreamStatus


def format_branch_name(
    name: str,
    is_primary: bool = False,
    is_branch_only: bool = False,
    is_current: bool = False,
) -> str:
    """
    Format branch name with optional indent for branches, and markers for the
    current and primary worktrees.

    Args:
        name: Branch name
        is_primary: Whether this row is the primary worktree
        is_branch_only: Whether this row is a branch without a worktree
        is_current: Whether this row is the worktree the command runs in

    Returns:
        Formatted branch name
    """
    indent = SYMBOL_BRANCH_ONLY if is_branch_only else ""
    current = SYMBOL_CURRENT if is_current else ""
    marker = SYMBOL_PRIMARY if is_primary else ""
    return f"{indent}{current}{name}{marker}"


def format_ahead_behind(ahead: int, behind: int) -> str:
    """
    Format commit divergence as arrows.

    Args:
        ahead: Commits only on the branch
        behind: Commits only on the base

    Returns:
        String such as "↑2 ↓1", empty when in sync
    """
    parts = []
    if ahead:
        parts.append(f"{SYMBOL_AHEAD}{ahead}")
    if behind:
        parts.append(f"{SYMBOL_BEHIND}{behind}")
    return " ".join(parts)


def format_diff(diff: DiffTotals) -> str:
    """
    Format line totals as "+added -deleted", empty when nothing changed.
    """
    if diff.is_empty:
        return ""
    return f"+{diff.added} -{diff.deleted}"


def format_upstream(upstream: UpstreamStatus) -> str:
    """
    Format divergence from the tracked remote branch.

    Returns:
        "origin ↑1 ↓3", the remote name alone when in sync, or empty
        without an upstream
    """
    if upstream.remote is None:
        return ""
    counts = format_ahead_behind(upstream.ahead, upstream.behind)
    return f"{upstream.remote} {counts}" if counts else upstream.remote
