"""Formatting utilities for worktree-keeper.

This package provides the pure functions behind each display column,
organized into logical modules:
- date: Commit age formatting
- branch: Branch name, divergence and diff formatting
- status: Row status, integration reasons and removal step formatting
"""

# Date formatters
from .date import format_age

# Branch formatters
from .branch import (
    format_branch_name,
    format_ahead_behind,
    format_diff,
    format_upstream,
)

# Status formatters
from .status import (
    format_status,
    format_integration_reason,
    format_worktree_step,
    format_branch_step,
    get_row_style_type,
)

__all__ = [
    # Date
    "format_age",
    # Branch
    "format_branch_name",
    "format_ahead_behind",
    "format_diff",
    "format_upstream",
    # Status
    "format_status",
    "format_integration_reason",
    "format_worktree_step",
    "format_branch_step",
    "get_row_style_type",
]
