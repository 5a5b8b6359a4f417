"""Concurrent enrichment of worktrees and branches into display records."""

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, List, Optional, Tuple, Union

from worktree_keeper.config import Config
from worktree_keeper.exceptions import GitQueryError
from worktree_keeper.models.list_item import BranchInfo, ListItem, WorktreeInfo, sort_items
from worktree_keeper.models.status import AheadBehind, DiffTotals, IntegrationResult
from worktree_keeper.models.worktree import Worktree
from worktree_keeper.services.git import (
    CommitDiffStats,
    GitRepository,
    IntegrationClassifier,
    UpstreamTracker,
    WorktreeService,
)
from worktree_keeper.utils.threading import get_optimal_worker_count
from worktree_keeper.logging_config import get_logger

logger = get_logger(__name__)

EnrichTask = Tuple[str, Callable[[], ListItem]]


class EnrichmentPipeline:
    """Builds one enriched record per worktree, and optionally per branch.

    Each task only touches its own worktree's checkout and commit range and
    returns a new immutable record, so tasks run concurrently with no shared
    state. Output order is re-established by commit timestamp afterwards.
    """

    def __init__(self, repo: GitRepository, config: Union[Config, dict]):
        """Initialize the pipeline.

        Args:
            repo: Git port for any worktree of the repository
            config: Configuration dictionary or Config object
        """
        self.repo = repo
        self.config = config
        self.worktree_service = WorktreeService(repo)

    def resolve_base(self, primary: Optional[Worktree]) -> Optional[str]:
        """Branch that ahead/behind and diff totals are measured against."""
        configured = self.config.get("main_branch")
        if configured:
            return configured
        if primary is not None and primary.branch:
            return primary.branch
        return self.repo.default_branch()

    def collect(self, include_branches: bool = False) -> List[ListItem]:
        """Enrich every worktree (and branch, if requested), newest commit first.

        Raises:
            GitQueryError: a worktree could not be enriched
        """
        worktrees = self.worktree_service.list_worktrees()
        primary = WorktreeService.primary(worktrees)
        base = self.resolve_base(primary)
        logger.debug(f"Using {base or '(none)'} as base branch")

        tasks: List[EnrichTask] = [
            (wt.path, lambda wt=wt: self.enrich_worktree(wt, base))
            for wt in worktrees
            if not wt.bare
        ]

        if include_branches:
            for branch in self._branches_without_worktree(worktrees):
                tasks.append((branch, lambda branch=branch: self.enrich_branch(branch, base)))

        return sort_items(self._run(tasks))

    def _branches_without_worktree(self, worktrees: List[Worktree]) -> List[str]:
        checked_out = {wt.branch for wt in worktrees if wt.branch}
        try:
            branches = self.repo.local_branches()
        except GitQueryError as e:
            logger.warning(f"Could not list branches: {e}")
            return []
        return [b for b in branches if b not in checked_out]

    def _run(self, tasks: List[EnrichTask]) -> List[ListItem]:
        if not tasks:
            return []

        if self.config.get("sequential", False):
            return [task() for _, task in tasks]

        max_workers = min(len(tasks), get_optimal_worker_count(self.config.get("workers")))
        logger.debug(f"Enriching {len(tasks)} items with {max_workers} workers")

        items: List[ListItem] = []
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            future_to_label = {executor.submit(task): label for label, task in tasks}
            for future in as_completed(future_to_label):
                try:
                    items.append(future.result())
                except Exception as e:
                    logger.error(f"Error enriching {future_to_label[future]}: {e}")
                    # Queued tasks are dropped; in-flight ones finish and are discarded
                    for pending in future_to_label:
                        pending.cancel()
                    raise
        return items

    def enrich_worktree(self, worktree: Worktree, base: Optional[str]) -> WorktreeInfo:
        """Build the record for one worktree.

        The primary worktree is never ahead of or behind itself, so its
        counts are zero without running git. An orphaned worktree (directory
        missing) is queried through the repository handle instead.

        Raises:
            GitQueryError: any query failed
        """
        repo = self.repo if worktree.is_orphaned else self.repo.at(worktree.path)

        commit = repo.commit_details(worktree.head)
        if worktree.is_primary:
            counts, branch_diff = AheadBehind(), DiffTotals()
        else:
            counts, branch_diff = CommitDiffStats(repo).compute(base, worktree.head)

        if worktree.is_orphaned:
            working_tree_diff, state = DiffTotals(), None
        else:
            working_tree_diff = repo.working_tree_diff_stats()
            state = repo.worktree_state()

        upstream = UpstreamTracker(repo).status(worktree.branch, worktree.head)

        integration = None
        if worktree.branch and not worktree.is_primary:
            integration = self._integration(repo, worktree.branch, base)

        return WorktreeInfo(
            worktree=worktree,
            commit=commit,
            counts=counts,
            branch_diff=branch_diff,
            working_tree_diff=working_tree_diff,
            upstream=upstream,
            worktree_state=state,
            integration=integration,
        )

    def enrich_branch(self, branch: str, base: Optional[str]) -> BranchInfo:
        """Build the record for a branch without a worktree.

        Branch rows are supplementary: a failing query is logged and the
        branch is returned with whatever was gathered before the failure.
        """
        fields: dict = {"name": branch}
        try:
            head = self.repo.rev_parse(branch)
            fields["head"] = head
            fields["commit"] = self.repo.commit_details(head)
            fields["counts"], fields["branch_diff"] = CommitDiffStats(self.repo).compute(base, head)
            fields["upstream"] = UpstreamTracker(self.repo).status(branch, head)
            fields["integration"] = self._integration(self.repo, branch, base)
        except GitQueryError as e:
            logger.warning(f"Failed to enrich branch {branch}: {e}")
            return BranchInfo(error=str(e), **fields)
        return BranchInfo(**fields)

    def _integration(
        self, repo: GitRepository, branch: str, base: Optional[str]
    ) -> Optional[IntegrationResult]:
        if not self.config.get("check_integration", False) or base is None:
            return None
        return IntegrationClassifier(repo).classify(branch, base)
