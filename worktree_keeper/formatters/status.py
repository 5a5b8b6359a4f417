"""Status, integration and removal formatting utilities."""

from typing import Optional

from worktree_keeper.constants import (
    INTEGRATION_REASONS,
    SYMBOL_LOCKED,
    SYMBOL_ORPHANED,
    RowStyleType,
)
from worktree_keeper.models import (
    IntegrationResult,
    ListItem,
    RemovalResult,
    StepOutcome,
    StepResult,
    WorktreeInfo,
)


def format_status(item: ListItem) -> str:
    """
    Format the state column for a listing row.

    Args:
        item: Enriched worktree or branch

    Returns:
        Operation in progress ("rebase", "merge", ...), markers for orphaned
        or locked worktrees, the integration outcome when it was checked,
        or "error" for a branch whose enrichment failed
    """
    if not isinstance(item, WorktreeInfo):
        if item.error:
            return "error"
        return _integration_label(item.integration)

    worktree = item.worktree
    if worktree.is_orphaned:
        return f"{SYMBOL_ORPHANED} orphaned"
    parts = []
    if item.worktree_state:
        parts.append(item.worktree_state)
    if worktree.locked:
        parts.append(SYMBOL_LOCKED)
    if not parts:
        parts.append(_integration_label(item.integration))
    return " ".join(p for p in parts if p)


def _integration_label(integration: Optional[IntegrationResult]) -> str:
    if integration is None:
        return ""
    if integration.is_integrated:
        return "integrated"
    return integration.status.value


def format_integration_reason(integration: Optional[IntegrationResult]) -> str:
    """
    Explain why a branch was considered safe to delete.

    The reason is omitted when the branch is the base branch itself.

    Args:
        integration: Classification of the branch against the base

    Returns:
        Reason such as "ancestor of main", or empty
    """
    if integration is None or integration.branch == integration.target:
        return ""
    template = INTEGRATION_REASONS.get(integration.status.value)
    return template.format(target=integration.target) if template else ""


def get_row_style_type(item: ListItem) -> str:
    """
    Determine the style type for a listing row.

    Args:
        item: Enriched worktree or branch

    Returns:
        RowStyleType constant
    """
    if item.is_primary:
        return RowStyleType.PRIMARY
    if isinstance(item, WorktreeInfo) and (item.worktree.is_orphaned or item.worktree_state):
        return RowStyleType.WARNING
    if not isinstance(item, WorktreeInfo) and item.error:
        return RowStyleType.WARNING
    if item.integration is not None and item.integration.is_integrated:
        return RowStyleType.INTEGRATED
    if not isinstance(item, WorktreeInfo):
        return RowStyleType.BRANCH
    return RowStyleType.ACTIVE


def format_worktree_step(result: RemovalResult) -> Optional[str]:
    """
    Describe the worktree step of a removal, None when there was no worktree.
    """
    step = result.worktree_result
    if result.worktree is None or step.outcome == StepOutcome.NOT_APPLICABLE:
        return None
    path = result.worktree.path
    if step.outcome == StepOutcome.DONE:
        return f"[green]Removed worktree[/green] {path}"
    if step.outcome == StepOutcome.SCHEDULED:
        return f"[green]Removing worktree[/green] {path} [dim](in background)[/dim]"
    return f"[red]Failed to remove worktree[/red] {path}: {step.message}"


def format_branch_step(result: RemovalResult) -> Optional[str]:
    """
    Describe the branch step of a removal, with the reason it was (not) deleted.

    Returns:
        Markup line, or None when there was no branch to act on
    """
    step: StepResult = result.branch_result
    branch = result.branch
    if step.outcome == StepOutcome.NOT_APPLICABLE:
        return None

    reason = format_integration_reason(result.integration)
    suffix = f" ({reason})" if reason else ""
    if step.outcome == StepOutcome.DONE:
        return f"[green]Deleted branch[/green] {branch}{suffix}"
    if step.outcome == StepOutcome.SCHEDULED:
        return f"[green]Deleting branch[/green] {branch}{suffix} [dim](in background)[/dim]"
    if step.outcome == StepOutcome.NOT_INTEGRATED:
        return (
            f"[yellow]Kept branch[/yellow] {branch}: {step.message}; "
            "use --force-delete to delete it anyway"
        )
    if step.outcome == StepOutcome.SKIPPED:
        return f"[dim]Kept branch {branch}: {step.message}[/dim]"
    return f"[red]Failed to delete branch[/red] {branch}: {step.message}"
