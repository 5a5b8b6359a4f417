"""Git-related services for worktree-keeper."""

from .repository import GitRepository
from .worktrees import WorktreeService
from .commit_stats import CommitDiffStats
from .upstream import UpstreamTracker
from .integration import IntegrationClassifier

__all__ = [
    "GitRepository",
    "WorktreeService",
    "CommitDiffStats",
    "UpstreamTracker",
    "IntegrationClassifier",
]
