"""Commit, divergence and integration status models."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


@dataclass(frozen=True)
class CommitDetails:
    """Timestamp and subject line of a commit."""

    timestamp: int = 0  # Seconds since epoch
    message: str = ""

    def to_dict(self) -> dict:
        return {"timestamp": self.timestamp, "commit_message": self.message}


@dataclass(frozen=True)
class AheadBehind:
    """Commits reachable from head but not base (ahead) and vice versa (behind)."""

    ahead: int = 0
    behind: int = 0

    def to_dict(self) -> dict:
        return {"ahead": self.ahead, "behind": self.behind}


@dataclass(frozen=True)
class DiffTotals:
    """Added and deleted line counts."""

    added: int = 0
    deleted: int = 0

    @property
    def is_empty(self) -> bool:
        return self.added == 0 and self.deleted == 0

    def as_tuple(self) -> Tuple[int, int]:
        return (self.added, self.deleted)


@dataclass(frozen=True)
class UpstreamStatus:
    """Divergence of a branch from its configured upstream."""

    remote: Optional[str] = None  # None when the branch has no upstream
    ahead: int = 0
    behind: int = 0

    def active(self) -> bool:
        """True only when the branch is out of sync with its upstream."""
        return self.ahead > 0 or self.behind > 0

    def to_dict(self) -> dict:
        return {
            "upstream_remote": self.remote,
            "upstream_ahead": self.ahead,
            "upstream_behind": self.behind,
        }


class IntegrationStatus(Enum):
    """Whether a branch's content is already present in a target branch."""

    ANCESTOR = "ancestor"
    TREE_MATCH = "tree-match"
    MERGE_NOOP = "merge-noop"
    NOT_INTEGRATED = "not-integrated"
    UNKNOWN = "unknown"

    @property
    def is_integrated(self) -> bool:
        """True when deleting the branch loses no work."""
        return self in (
            IntegrationStatus.ANCESTOR,
            IntegrationStatus.TREE_MATCH,
            IntegrationStatus.MERGE_NOOP,
        )


@dataclass(frozen=True)
class IntegrationResult:
    """Outcome of classifying a branch against a target."""

    branch: str
    target: str
    status: IntegrationStatus
    diagnostic: Optional[str] = None  # Git error text when status is UNKNOWN

    @property
    def is_integrated(self) -> bool:
        return self.status.is_integrated

    def to_dict(self) -> dict:
        return {
            "branch": self.branch,
            "target": self.target,
            "status": self.status.value,
            "diagnostic": self.diagnostic,
        }
