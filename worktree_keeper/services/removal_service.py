"""Safe removal of worktrees and their branches."""

import os
from typing import List, Optional, Tuple, Union

from worktree_keeper.config import Config
from worktree_keeper.exceptions import (
    AmbiguousTargetError,
    GitQueryError,
    RemovalBlockedError,
)
from worktree_keeper.models.removal import (
    NOT_APPLICABLE,
    RemovalResult,
    RemovalState,
    RemovalTarget,
    StepOutcome,
    StepResult,
)
from worktree_keeper.models.status import IntegrationResult, IntegrationStatus
from worktree_keeper.models.worktree import Worktree
from worktree_keeper.services.git import GitRepository, IntegrationClassifier, WorktreeService
from worktree_keeper.services.git.worktrees import canonical_path
from worktree_keeper.logging_config import get_logger

logger = get_logger(__name__)

CURRENT_WORKTREE = "@"


class RemovalService:
    """Removes worktrees and deletes branches without losing unintegrated work.

    Each target is handled on its own, in the order given:

    - the primary worktree is never removed;
    - a worktree with uncommitted or untracked changes is only removed with
      ``force``;
    - the worktree is removed first, then the branch is deleted if the
      integration check (or ``force_delete``) allows it. The two steps
      succeed or fail independently and nothing is rolled back.
    """

    def __init__(
        self,
        repo: GitRepository,
        config: Union[Config, dict],
        cwd: Optional[str] = None,
    ):
        """Initialize the removal service.

        Args:
            repo: Git port for any worktree of the repository
            config: Configuration dictionary or Config object
            cwd: Directory `@` and relative paths are resolved against
        """
        self.repo = repo
        self.config = config
        self.cwd = cwd or os.getcwd()
        self.worktree_service = WorktreeService(repo)
        self.classifier = IntegrationClassifier(repo)
        self._current: Optional[Worktree] = None

    def resolve_base(self, primary: Optional[Worktree]) -> Optional[str]:
        """Branch that integration is checked against (the default branch)."""
        configured = self.config.get("main_branch")
        if configured:
            return configured
        default = self.repo.default_branch()
        if default:
            return default
        return primary.branch if primary is not None else None

    def remove(self, identifiers: List[str]) -> List[RemovalResult]:
        """Remove each target and report every outcome, in the order given.

        With no identifiers, the current worktree is removed.
        """
        identifiers = identifiers or [CURRENT_WORKTREE]
        self._anchor_to_primary()
        results = []
        for identifier in identifiers:
            result = self.remove_target(identifier)
            logger.info(f"{identifier}: {result.state.value}")
            results.append(result)
        return results

    def _anchor_to_primary(self) -> None:
        """Send every later query through the primary checkout.

        The handle we were given may point into a worktree that is about to
        be removed (usually the current one). The current worktree is
        resolved here as well, before anything is removed.
        """
        try:
            worktrees = self.worktree_service.list_worktrees()
        except GitQueryError as e:
            # Each target reports the failure on its own
            logger.debug(f"Could not list worktrees up front: {e}")
            return

        self._current = self.worktree_service.current(worktrees, self.cwd)
        anchor = self._mutation_repo(WorktreeService.primary(worktrees))
        self.repo = anchor
        self.worktree_service = WorktreeService(anchor)
        self.classifier = IntegrationClassifier(anchor)

    def remove_target(self, identifier: str) -> RemovalResult:
        """Select, guard, classify and remove a single target."""
        try:
            worktrees = self.worktree_service.list_worktrees()
            target = self.select(identifier, worktrees)
        except (AmbiguousTargetError, GitQueryError) as e:
            logger.warning(f"Cannot remove {identifier}: {e}")
            return RemovalResult(target=identifier, state=RemovalState.FAILED, error=str(e))

        primary = WorktreeService.primary(worktrees)
        try:
            self.check_guards(target)
            base = self.resolve_base(primary)
        except RemovalBlockedError as e:
            logger.warning(str(e))
            return RemovalResult(
                target=identifier,
                state=RemovalState.BLOCKED,
                worktree=target.worktree,
                branch=target.branch,
                error=str(e),
            )
        except GitQueryError as e:
            return RemovalResult(
                target=identifier,
                state=RemovalState.FAILED,
                worktree=target.worktree,
                branch=target.branch,
                error=str(e),
            )

        integration, branch_plan = self.plan_branch_deletion(target, base)
        state = (
            RemovalState.APPROVED_FOR_DELETION
            if branch_plan is None
            else RemovalState.KEPT_WORKTREE_ONLY
        )
        logger.debug(f"{identifier}: {state.value}")

        mutator = self._mutation_repo(primary)
        if self.config.get("background", True) and target.worktree is not None:
            worktree_result, branch_result = self._execute_background(mutator, target, branch_plan)
        else:
            worktree_result, branch_result = self._execute(mutator, target, branch_plan)

        return RemovalResult(
            target=identifier,
            state=self._final_state(state, worktree_result, branch_result),
            worktree=target.worktree,
            branch=target.branch,
            base=base,
            worktree_result=worktree_result,
            branch_result=branch_result,
            integration=integration,
        )

    # -- Selection and guards ---------------------------------------------

    def select(self, identifier: str, worktrees: List[Worktree]) -> RemovalTarget:
        """Resolve a name, path or `@` to a worktree, or to a branch with no checkout.

        Raises:
            AmbiguousTargetError: nothing matched, or several worktrees did
        """
        if identifier == CURRENT_WORKTREE:
            if self._current is not None:
                current = WorktreeService.find_by_path(worktrees, self._current.path)
            else:
                current = self.worktree_service.current(worktrees, self.cwd)
            if current is None:
                raise AmbiguousTargetError(identifier)
            return RemovalTarget(identifier, current, current.branch)

        candidates: List[Worktree] = []
        by_branch = WorktreeService.find_by_branch(worktrees, identifier)
        if by_branch is not None:
            candidates.append(by_branch)
        by_path = WorktreeService.find_by_path(
            worktrees, canonical_path(os.path.join(self.cwd, identifier))
        )
        if by_path is not None and by_path not in candidates:
            candidates.append(by_path)

        if len(candidates) > 1:
            raise AmbiguousTargetError(identifier, [wt.path for wt in candidates])
        if candidates:
            worktree = candidates[0]
            return RemovalTarget(identifier, worktree, worktree.branch)

        if self.repo.branch_exists(identifier):
            return RemovalTarget(identifier, None, identifier)
        raise AmbiguousTargetError(identifier)

    def check_guards(self, target: RemovalTarget) -> None:
        """Refuse the primary worktree and, without force, dirty worktrees.

        Raises:
            RemovalBlockedError: a guard refused the target
            GitQueryError: the worktree status could not be read
        """
        worktree = target.worktree
        if worktree is None:
            return
        if worktree.is_primary:
            raise RemovalBlockedError(target.label, RemovalBlockedError.PRIMARY_WORKTREE)
        if not self.config.get("force", False) and self.worktree_service.is_dirty(worktree):
            raise RemovalBlockedError(
                target.label,
                RemovalBlockedError.UNCOMMITTED_CHANGES,
                "commit or stash them first, or use --force",
            )

    # -- Classification ---------------------------------------------------

    def plan_branch_deletion(
        self, target: RemovalTarget, base: Optional[str]
    ) -> Tuple[Optional[IntegrationResult], Optional[StepResult]]:
        """Decide whether the branch will be deleted.

        Returns:
            (integration, skip) where skip is None when deletion should proceed,
            otherwise the result to report for the branch step
        """
        if target.branch is None:
            return None, StepResult(StepOutcome.NOT_APPLICABLE, "detached HEAD, no branch to delete")
        if not self.config.get("delete_branch", True):
            return None, StepResult(StepOutcome.SKIPPED, "branch kept")
        if self.config.get("force_delete", False):
            return None, None
        if base is None:
            return None, StepResult(
                StepOutcome.SKIPPED, "no default branch to check integration against"
            )

        integration = self.classifier.classify(target.branch, base)
        if integration.is_integrated:
            return integration, None
        if integration.status == IntegrationStatus.UNKNOWN:
            return integration, StepResult(
                StepOutcome.FAILED,
                f"could not verify that {target.branch} is integrated: {integration.diagnostic}",
            )
        return integration, StepResult(
            StepOutcome.NOT_INTEGRATED,
            f"{target.branch} has changes not integrated into {base}",
        )

    # -- Execution --------------------------------------------------------

    def _mutation_repo(self, primary: Optional[Worktree]) -> GitRepository:
        """Mutations run from the primary checkout, which is never removed."""
        if primary is not None and not primary.is_orphaned:
            return self.repo.at(primary.path)
        return self.repo

    def _worktree_command(self, worktree: Worktree) -> List[str]:
        if worktree.is_orphaned:
            return ["worktree", "prune"]
        command = ["worktree", "remove", worktree.path]
        if self.config.get("force", False):
            command.append("--force")
        return command

    def _execute(
        self,
        mutator: GitRepository,
        target: RemovalTarget,
        branch_plan: Optional[StepResult],
    ) -> Tuple[StepResult, StepResult]:
        worktree_result = NOT_APPLICABLE
        if target.worktree is not None:
            worktree_result = self._remove_worktree(mutator, target.worktree)

        if branch_plan is not None:
            return worktree_result, branch_plan
        if worktree_result.failed:
            # git refuses to delete a branch that is still checked out
            return worktree_result, StepResult(
                StepOutcome.SKIPPED, "worktree was not removed, branch kept"
            )

        try:
            mutator.delete_branch(target.branch, force=True)
            branch_result = StepResult(StepOutcome.DONE)
        except GitQueryError as e:
            logger.error(f"Failed to delete branch {target.branch}: {e}")
            branch_result = StepResult(StepOutcome.FAILED, str(e))
        return worktree_result, branch_result

    def _remove_worktree(self, mutator: GitRepository, worktree: Worktree) -> StepResult:
        try:
            if worktree.is_orphaned:
                mutator.prune_worktrees()
            else:
                mutator.remove_worktree(worktree.path, force=self.config.get("force", False))
        except GitQueryError as e:
            logger.error(f"Failed to remove worktree at {worktree.path}: {e}")
            return StepResult(StepOutcome.FAILED, str(e))
        return StepResult(StepOutcome.DONE)

    def _execute_background(
        self,
        mutator: GitRepository,
        target: RemovalTarget,
        branch_plan: Optional[StepResult],
    ) -> Tuple[StepResult, StepResult]:
        commands = [self._worktree_command(target.worktree)]
        if branch_plan is None:
            commands.append(["branch", "-D", target.branch])

        try:
            pid = mutator.spawn_background(commands)
        except OSError as e:
            logger.error(f"Failed to start background removal of {target.label}: {e}")
            failed = StepResult(StepOutcome.FAILED, str(e))
            return failed, branch_plan if branch_plan is not None else failed

        logger.debug(f"Background removal of {target.label} running as pid {pid}")
        scheduled = StepResult(StepOutcome.SCHEDULED)
        return scheduled, branch_plan if branch_plan is not None else scheduled

    @staticmethod
    def _final_state(
        planned: RemovalState, worktree_result: StepResult, branch_result: StepResult
    ) -> RemovalState:
        if worktree_result.failed or branch_result.failed:
            return RemovalState.FAILED
        if worktree_result.succeeded or branch_result.succeeded:
            return RemovalState.REMOVED
        return planned
