"""Worktree enumeration and lookup for worktree-keeper."""

import os
from typing import Any, Dict, List, Optional

from worktree_keeper.exceptions import GitQueryError
from worktree_keeper.models.worktree import Worktree
from worktree_keeper.services.git.repository import GitRepository
from worktree_keeper.logging_config import get_logger

logger = get_logger(__name__)


def canonical_path(path: str) -> str:
    """Absolute path with symlinks resolved."""
    return os.path.realpath(os.path.abspath(path))


def _build_worktree(entry: Dict[str, Any], is_primary: bool) -> Worktree:
    path = entry["path"]
    return Worktree(
        path=path,
        head=entry.get("HEAD", ""),
        branch=entry.get("branch") or None,
        is_primary=is_primary,
        bare=entry.get("bare", False),
        detached=entry.get("detached", False),
        locked=entry.get("locked", False),
        prunable=entry.get("prunable", False),
        is_orphaned=not os.path.exists(path),
    )


def parse_worktree_list(output: str) -> List[Worktree]:
    """Parse `git worktree list --porcelain` output.

    Format:
        worktree /path/to/worktree
        HEAD commit_sha
        branch refs/heads/branch-name   (or "detached", or "bare")
        (blank line between worktrees)

    The first entry is always the primary worktree.
    """
    worktrees: List[Worktree] = []
    entries: List[Dict[str, Any]] = []
    current: Dict[str, Any] = {}

    for line in output.split("\n"):
        line = line.strip()

        if not line:
            if current.get("path"):
                entries.append(current)
            current = {}
            continue

        key, _, value = line.partition(" ")
        if key == "worktree":
            if current.get("path"):
                entries.append(current)
            current = {"path": canonical_path(value)}
        elif key == "HEAD":
            current["HEAD"] = value
        elif key == "branch":
            if value.startswith("refs/heads/"):
                current["branch"] = value[len("refs/heads/"):]
            else:
                current["branch"] = value
        elif key == "detached":
            current["detached"] = True
        elif key == "bare":
            current["bare"] = True
        elif key == "locked":
            current["locked"] = True
        elif key == "prunable":
            current["prunable"] = True

    if current.get("path"):
        entries.append(current)

    for index, entry in enumerate(entries):
        worktrees.append(_build_worktree(entry, is_primary=index == 0))
    return worktrees


class WorktreeService:
    """Service for enumerating and looking up git worktrees."""

    def __init__(self, repo: GitRepository):
        """Initialize the worktree service.

        Args:
            repo: Git port for any worktree of the repository
        """
        self.repo = repo

    def list_worktrees(self) -> List[Worktree]:
        """Get all worktrees of the repository, primary first.

        Raises:
            GitQueryError: the worktree list could not be read
        """
        worktrees = parse_worktree_list(self.repo.worktree_list_porcelain())
        logger.debug(f"Found {len(worktrees)} worktrees")
        for wt in worktrees:
            logger.debug(f"  {wt}")
        return worktrees

    @staticmethod
    def primary(worktrees: List[Worktree]) -> Optional[Worktree]:
        return next((wt for wt in worktrees if wt.is_primary), None)

    @staticmethod
    def find_by_branch(worktrees: List[Worktree], branch: str) -> Optional[Worktree]:
        return next((wt for wt in worktrees if wt.branch == branch), None)

    @staticmethod
    def find_by_path(worktrees: List[Worktree], path: str) -> Optional[Worktree]:
        wanted = canonical_path(path)
        return next((wt for wt in worktrees if wt.path == wanted), None)

    def current(self, worktrees: List[Worktree], cwd: str) -> Optional[Worktree]:
        """Find the worktree that contains `cwd`."""
        try:
            root = self.repo.at(cwd).worktree_root()
        except GitQueryError as e:
            logger.debug(f"{cwd} is not inside a worktree: {e}")
            return None
        return self.find_by_path(worktrees, root)

    def is_dirty(self, worktree: Worktree) -> bool:
        """Check for uncommitted or untracked changes in a worktree."""
        if worktree.is_orphaned or worktree.bare:
            return False
        status = self.repo.at(worktree.path).status_porcelain()
        return any(line.strip() for line in status.splitlines())
