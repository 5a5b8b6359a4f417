"""Worktree data models."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Worktree:
    """A git working directory as reported by `git worktree list`."""

    path: str  # Absolute, canonical
    head: str
    branch: Optional[str] = None  # None means detached HEAD (or a bare entry)
    is_primary: bool = False  # Is this the repository's main checkout?
    bare: bool = False
    detached: bool = False
    locked: bool = False
    prunable: bool = False
    is_orphaned: bool = False  # Directory missing?

    @property
    def display_name(self) -> str:
        """Branch name, or a placeholder for detached HEAD."""
        return self.branch if self.branch else "(detached)"

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "branch": self.branch,
            "head": self.head,
            "bare": self.bare,
            "detached": self.detached,
            "locked": self.locked,
            "prunable": self.prunable,
            "is_orphaned": self.is_orphaned,
        }

    def __str__(self) -> str:
        """String representation of worktree."""
        status = "orphaned" if self.is_orphaned else "active"
        primary_marker = " (primary)" if self.is_primary else ""
        return f"{self.display_name} @ {self.path}{primary_marker} [{status}]"
