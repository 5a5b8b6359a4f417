"""Removal target and per-target result models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from worktree_keeper.models.status import IntegrationResult
from worktree_keeper.models.worktree import Worktree


class RemovalState(Enum):
    """Where a removal target ended up.

    Selection and classification happen in
    ``RemovalService.select`` and ``RemovalService.plan_branch_deletion``
    and are never reported. A target then settles on one of
    {ApprovedForDeletion, KeptWorktreeOnly, Blocked} and ends as Removed or
    Failed once its steps have run.
    """

    APPROVED_FOR_DELETION = "approved-for-deletion"
    KEPT_WORKTREE_ONLY = "kept-worktree-only"
    BLOCKED = "blocked"
    REMOVED = "removed"
    FAILED = "failed"


class StepOutcome(Enum):
    """Outcome of one mutating step (worktree removal or branch deletion)."""

    DONE = "done"
    SCHEDULED = "scheduled"  # Handed to a background process
    SKIPPED = "skipped"
    NOT_INTEGRATED = "not-integrated"
    FAILED = "failed"
    NOT_APPLICABLE = "not-applicable"


@dataclass(frozen=True)
class StepResult:
    """Result of a single mutating step."""

    outcome: StepOutcome
    message: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.outcome in (StepOutcome.DONE, StepOutcome.SCHEDULED)

    @property
    def failed(self) -> bool:
        return self.outcome == StepOutcome.FAILED

    def to_dict(self) -> dict:
        return {"outcome": self.outcome.value, "message": self.message}


NOT_APPLICABLE = StepResult(StepOutcome.NOT_APPLICABLE)


@dataclass(frozen=True)
class RemovalTarget:
    """A user-given identifier resolved to a worktree and/or branch."""

    identifier: str
    worktree: Optional[Worktree] = None
    branch: Optional[str] = None

    @property
    def label(self) -> str:
        if self.branch:
            return self.branch
        if self.worktree:
            return self.worktree.path
        return self.identifier


@dataclass(frozen=True)
class RemovalResult:
    """Independent outcome of removing one target."""

    target: str
    state: RemovalState
    worktree: Optional[Worktree] = None
    branch: Optional[str] = None
    base: Optional[str] = None
    worktree_result: StepResult = field(default_factory=lambda: NOT_APPLICABLE)
    branch_result: StepResult = field(default_factory=lambda: NOT_APPLICABLE)
    integration: Optional[IntegrationResult] = None
    error: Optional[str] = None  # Blocked / ambiguous / unexpected failure

    @property
    def is_partial_failure(self) -> bool:
        """One step succeeded while the other failed."""
        results = (self.worktree_result, self.branch_result)
        return any(r.succeeded for r in results) and any(r.failed for r in results)

    @property
    def exit_code(self) -> int:
        if self.state in (RemovalState.BLOCKED, RemovalState.FAILED):
            return 1
        if self.worktree_result.failed or self.branch_result.failed:
            return 1
        return 0

    def to_dict(self) -> dict:
        return {
            "target": self.target,
            "state": self.state.value,
            "worktree": self.worktree.to_dict() if self.worktree else None,
            "branch": self.branch,
            "base": self.base,
            "worktree_result": self.worktree_result.to_dict(),
            "branch_result": self.branch_result.to_dict(),
            "integration": self.integration.to_dict() if self.integration else None,
            "error": self.error,
        }
