"""Ahead/behind and line diff statistics between two refs."""

from typing import Optional, Tuple

from worktree_keeper.models.status import AheadBehind, DiffTotals
from worktree_keeper.services.git.repository import GitRepository
from worktree_keeper.logging_config import get_logger

logger = get_logger(__name__)


class CommitDiffStats:
    """Computes how far `head` has moved relative to a base ref."""

    def __init__(self, repo: GitRepository):
        self.repo = repo

    def compute(self, base: Optional[str], head: str) -> Tuple[AheadBehind, DiffTotals]:
        """Get ahead/behind counts and branch diff totals of head against base.

        With no base there is nothing to be ahead of, so the zero values are
        returned without running git.

        Raises:
            GitQueryError: either query failed (not retried)
        """
        if base is None:
            return AheadBehind(), DiffTotals()

        counts = self.repo.ahead_behind(base, head)
        diff = self.repo.diff_stats(base, head)
        logger.debug(
            f"{head[:12]} vs {base}: ahead {counts.ahead}, behind {counts.behind}, "
            f"+{diff.added} -{diff.deleted}"
        )
        return counts, diff

