"""Data models for worktree-keeper."""

from .worktree import Worktree
from .status import (
    AheadBehind,
    CommitDetails,
    DiffTotals,
    IntegrationResult,
    IntegrationStatus,
    UpstreamStatus,
)
from .list_item import BranchInfo, ListItem, WorktreeInfo, sort_items
from .removal import (
    RemovalResult,
    RemovalState,
    RemovalTarget,
    StepOutcome,
    StepResult,
)

__all__ = [
    "Worktree",
    "AheadBehind",
    "CommitDetails",
    "DiffTotals",
    "IntegrationResult",
    "IntegrationStatus",
    "UpstreamStatus",
    "BranchInfo",
    "ListItem",
    "WorktreeInfo",
    "sort_items",
    "RemovalResult",
    "RemovalState",
    "RemovalTarget",
    "StepOutcome",
    "StepResult",
]
