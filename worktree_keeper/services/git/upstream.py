"""Sync state of a branch with its configured upstream."""

from typing import Optional

from worktree_keeper.models.status import UpstreamStatus
from worktree_keeper.services.git.repository import GitRepository
from worktree_keeper.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_REMOTE = "origin"


def remote_name(upstream: str) -> str:
    """Remote part of an upstream ref such as "origin/feature"."""
    remote, sep, _ = upstream.partition("/")
    return remote if sep and remote else DEFAULT_REMOTE


class UpstreamTracker:
    """Resolves a branch's upstream and how far the branch has drifted from it."""

    def __init__(self, repo: GitRepository):
        self.repo = repo

    def status(self, branch: Optional[str], head: str) -> UpstreamStatus:
        """Get the upstream status of `branch`, whose tip is `head`.

        A missing upstream (or a detached HEAD) is the common case and yields
        the empty status rather than an error.

        Raises:
            GitQueryError: the upstream exists but the commit count failed
        """
        if not branch:
            return UpstreamStatus()

        upstream = self.repo.upstream_branch(branch)
        if upstream is None:
            return UpstreamStatus()

        counts = self.repo.ahead_behind(upstream, head)
        return UpstreamStatus(remote=remote_name(upstream), ahead=counts.ahead, behind=counts.behind)
