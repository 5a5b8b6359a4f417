"""Core functionality for worktree-keeper."""

from .worktree_keeper import WorktreeKeeper

__all__ = ["WorktreeKeeper"]
