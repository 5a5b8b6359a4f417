"""Integration detection: is a branch's work already contained in a target branch?"""

from typing import Callable, List, Optional

from worktree_keeper.exceptions import GitQueryError
from worktree_keeper.models.status import IntegrationResult, IntegrationStatus
from worktree_keeper.services.git.repository import GitRepository
from worktree_keeper.logging_config import get_logger

logger = get_logger(__name__)

IntegrationCheck = Callable[[str, str], Optional[IntegrationStatus]]


class IntegrationClassifier:
    """Decides whether deleting a branch would lose work not reachable from a target.

    Checks run cheapest first and stop at the first definitive answer:

    1. Ancestor: the branch tip is in the target's history (fast-forward or
       regular merge).
    2. Tree match: the branch tip and the target tip have identical trees,
       e.g. a squash merge landed verbatim.
    3. Merge no-op: merging the branch into the target would produce the
       target's current tree, so the target already contains everything the
       branch adds even though it has moved on since.

    Nothing is cached: the repository can change between invocations.
    """

    def __init__(self, repo: GitRepository):
        """Initialize the classifier.

        Args:
            repo: Git port for any worktree of the repository
        """
        self.repo = repo

    @property
    def checks(self) -> List[IntegrationCheck]:
        return [
            self._check_same_ref,
            self._check_ancestor,
            self._check_tree_match,
            self._check_merge_noop,
        ]

    def classify(self, branch: str, target: str) -> IntegrationResult:
        """Classify `branch` against `target`.

        Git failures never count as integrated: they yield UNKNOWN with the
        git diagnostic attached.
        """
        try:
            for check in self.checks:
                status = check(branch, target)
                if status is not None:
                    logger.debug(f"{branch} vs {target}: {status.value} ({check.__name__})")
                    return IntegrationResult(branch, target, status)
        except GitQueryError as e:
            logger.warning(f"Could not check whether {branch} is integrated into {target}: {e}")
            return IntegrationResult(branch, target, IntegrationStatus.UNKNOWN, diagnostic=str(e))

        logger.debug(f"{branch} vs {target}: not integrated")
        return IntegrationResult(branch, target, IntegrationStatus.NOT_INTEGRATED)

    def _check_same_ref(self, branch: str, target: str) -> Optional[IntegrationStatus]:
        """A branch is trivially contained in itself."""
        if branch == target:
            return IntegrationStatus.ANCESTOR
        return None

    def _check_ancestor(self, branch: str, target: str) -> Optional[IntegrationStatus]:
        """Check if the branch tip is reachable from the target."""
        if self.repo.is_ancestor(branch, target):
            return IntegrationStatus.ANCESTOR
        return None

    def _check_tree_match(self, branch: str, target: str) -> Optional[IntegrationStatus]:
        """Compare tree objects, not diff output: identical trees are identical content."""
        if self.repo.tree_id(branch) == self.repo.tree_id(target):
            return IntegrationStatus.TREE_MATCH
        return None

    def _check_merge_noop(self, branch: str, target: str) -> Optional[IntegrationStatus]:
        """Simulate merging the branch into the target and compare the result."""
        merged_tree = self.repo.merge_tree(target, branch)
        if merged_tree is None:
            logger.debug(f"Merging {branch} into {target} would conflict")
            return IntegrationStatus.NOT_INTEGRATED
        if merged_tree == self.repo.tree_id(target):
            return IntegrationStatus.MERGE_NOOP
        return None
