"""Display records produced by the enrichment pipeline.

A listing mixes two kinds of rows: worktrees and branches without a checkout.
Both expose the same accessors (``branch_name``, ``timestamp``, ``ahead``,
``behind``, ``is_primary``) so the table renderer and the sort never need to
know which kind they hold; ``kind`` is the tag used in JSON output.
"""

from dataclasses import dataclass, field
from typing import ClassVar, List, Optional, Union

from worktree_keeper.models.status import (
    AheadBehind,
    CommitDetails,
    DiffTotals,
    IntegrationResult,
    UpstreamStatus,
)
from worktree_keeper.models.worktree import Worktree


@dataclass(frozen=True)
class WorktreeInfo:
    """A worktree enriched with commit, divergence and working tree status."""

    kind: ClassVar[str] = "worktree"

    worktree: Worktree
    commit: CommitDetails
    counts: AheadBehind = field(default_factory=AheadBehind)
    branch_diff: DiffTotals = field(default_factory=DiffTotals)
    working_tree_diff: DiffTotals = field(default_factory=DiffTotals)
    upstream: UpstreamStatus = field(default_factory=UpstreamStatus)
    worktree_state: Optional[str] = None  # merge, rebase, ... in progress
    integration: Optional[IntegrationResult] = None

    @property
    def branch_name(self) -> str:
        return self.worktree.display_name

    @property
    def timestamp(self) -> int:
        return self.commit.timestamp

    @property
    def ahead(self) -> int:
        return self.counts.ahead

    @property
    def behind(self) -> int:
        return self.counts.behind

    @property
    def is_primary(self) -> bool:
        return self.worktree.is_primary

    @property
    def has_changes(self) -> bool:
        return not self.working_tree_diff.is_empty

    def to_dict(self) -> dict:
        data = {"type": self.kind, "worktree": self.worktree.to_dict()}
        data.update(self.commit.to_dict())
        data.update(self.counts.to_dict())
        data["working_tree_diff"] = list(self.working_tree_diff.as_tuple())
        data["branch_diff"] = list(self.branch_diff.as_tuple())
        data["is_primary"] = self.is_primary
        data.update(self.upstream.to_dict())
        data["worktree_state"] = self.worktree_state
        data["integration"] = self.integration.to_dict() if self.integration else None
        return data


@dataclass(frozen=True)
class BranchInfo:
    """A local branch that has no worktree, enriched without a checkout."""

    kind: ClassVar[str] = "branch"

    name: str
    head: str = ""
    commit: CommitDetails = field(default_factory=CommitDetails)
    counts: AheadBehind = field(default_factory=AheadBehind)
    branch_diff: DiffTotals = field(default_factory=DiffTotals)
    upstream: UpstreamStatus = field(default_factory=UpstreamStatus)
    integration: Optional[IntegrationResult] = None
    error: Optional[str] = None  # Set when enrichment stopped part way

    @property
    def branch_name(self) -> str:
        return self.name

    @property
    def timestamp(self) -> int:
        return self.commit.timestamp

    @property
    def ahead(self) -> int:
        return self.counts.ahead

    @property
    def behind(self) -> int:
        return self.counts.behind

    @property
    def is_primary(self) -> bool:
        return False

    @property
    def has_changes(self) -> bool:
        return False

    def to_dict(self) -> dict:
        data = {"type": self.kind, "name": self.name, "head": self.head}
        data.update(self.commit.to_dict())
        data.update(self.counts.to_dict())
        data["branch_diff"] = list(self.branch_diff.as_tuple())
        data.update(self.upstream.to_dict())
        data["integration"] = self.integration.to_dict() if self.integration else None
        data["error"] = self.error
        return data


ListItem = Union[WorktreeInfo, BranchInfo]


def sort_items(items: List[ListItem]) -> List[ListItem]:
    """Order items by commit timestamp, most recent first."""
    return sorted(items, key=lambda item: item.timestamp, reverse=True)
