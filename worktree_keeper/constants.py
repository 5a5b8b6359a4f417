"""Shared constants for worktree-keeper."""

from dataclasses import dataclass
from typing import List


@dataclass
class ColumnDefinition:
    """Definition of a table column."""

    key: str
    label: str
    width: int = 0  # 0 means auto-width


COLUMNS: List[ColumnDefinition] = [
    ColumnDefinition("branch", "Branch", 30),
    ColumnDefinition("status", "Status", 10),
    ColumnDefinition("changes", "Working ±", 12),
    ColumnDefinition("main", "Main ↕", 10),
    ColumnDefinition("main_diff", "Main ±", 12),
    ColumnDefinition("path", "Path"),
    ColumnDefinition("remote", "Remote ↕", 14),
    ColumnDefinition("age", "Age", 8),
    ColumnDefinition("message", "Message", 40),
]


# Symbol constants
SYMBOL_AHEAD = "↑"
SYMBOL_BEHIND = "↓"
SYMBOL_PRIMARY = " *"
SYMBOL_CURRENT = "@ "
SYMBOL_BRANCH_ONLY = "  └─ "
SYMBOL_ORPHANED = "⚠"
SYMBOL_LOCKED = "🔒"


# Integration outcomes as shown next to a removed branch
INTEGRATION_REASONS = {
    "ancestor": "ancestor of {target}",
    "tree-match": "same content as {target}",
    "merge-noop": "already integrated into {target}",
}


# Color/style constants for different row kinds
class RowStyleType:
    """Style types for listing rows."""

    PRIMARY = "primary"
    INTEGRATED = "integrated"
    WARNING = "warning"  # Orphaned, or an operation in progress
    BRANCH = "branch"
    ACTIVE = "active"


# CLI colors (Rich color names)
CLI_COLORS = {
    RowStyleType.PRIMARY: "cyan",
    RowStyleType.INTEGRATED: "green",
    RowStyleType.WARNING: "yellow",
    RowStyleType.BRANCH: "dim",
    RowStyleType.ACTIVE: None,  # Default color
}
