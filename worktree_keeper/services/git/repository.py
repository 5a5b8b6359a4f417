"""Git query port: runs git subcommands against one repository or worktree path."""

import os
import shlex
from subprocess import DEVNULL, Popen
from typing import List, Optional, Sequence

import git

from worktree_keeper.exceptions import GitQueryError
from worktree_keeper.models.status import AheadBehind, CommitDetails, DiffTotals
from worktree_keeper.logging_config import get_logger

logger = get_logger(__name__)

# Files/directories in a worktree's git dir that mark an operation in progress
WORKTREE_STATE_MARKERS = [
    ("rebase-merge", "rebase"),
    ("rebase-apply", "rebase"),
    ("MERGE_HEAD", "merge"),
    ("CHERRY_PICK_HEAD", "cherry-pick"),
    ("REVERT_HEAD", "revert"),
    ("BISECT_LOG", "bisect"),
]


def parse_numstat(output: str) -> DiffTotals:
    """Sum `git diff --numstat` output into added/deleted totals.

    Binary files report `-` for both counts and are skipped.
    """
    added = 0
    deleted = 0
    for line in output.splitlines():
        parts = line.split("\t")
        if len(parts) < 3:
            continue
        if parts[0] == "-" or parts[1] == "-":
            continue
        added += int(parts[0])
        deleted += int(parts[1])
    return DiffTotals(added=added, deleted=deleted)


class GitRepository:
    """Runs git against a single path.

    Every call builds a fresh ``git.Git`` command runner bound to ``path``, so a
    GitRepository can be shared between threads without locking.
    """

    def __init__(self, path: str):
        """Initialize the repository handle.

        Args:
            path: Worktree (or bare repository) directory git runs in
        """
        self.path = path

    def __repr__(self) -> str:
        return f"GitRepository({self.path!r})"

    def _get_git(self) -> git.Git:
        return git.Git(self.path)

    def at(self, path: str) -> "GitRepository":
        """Return a handle for another worktree of the same repository."""
        return GitRepository(path)

    def run(self, *args: str) -> str:
        """Run `git <args>` and return stdout.

        Raises:
            GitQueryError: git exited non-zero or could not be started
        """
        logger.debug(f"[{self.path}] git {' '.join(args)}")
        try:
            status, stdout, stderr = self._get_git().execute(
                ["git", *args],
                with_extended_output=True,
                with_exceptions=False,
            )
        except git.exc.CommandError as e:
            raise GitQueryError(args, None, str(e)) from e

        if status != 0:
            raise GitQueryError(args, status, stderr)
        return stdout

    # -- Refs and commits -------------------------------------------------

    def rev_parse(self, ref: str) -> str:
        """Resolve a ref to a commit id."""
        return self.run("rev-parse", "--verify", f"{ref}^{{commit}}").strip()

    def commit_details(self, ref: str) -> CommitDetails:
        """Get the commit time and subject line of a ref."""
        output = self.run("log", "-1", "--format=%ct%n%s", ref)
        timestamp, _, message = output.partition("\n")
        return CommitDetails(timestamp=int(timestamp.strip()), message=message.strip())

    def ahead_behind(self, base: str, head: str) -> AheadBehind:
        """Count commits on each side of the symmetric difference base...head."""
        output = self.run("rev-list", "--left-right", "--count", f"{base}...{head}")
        behind, ahead = output.split()
        return AheadBehind(ahead=int(ahead), behind=int(behind))

    def diff_stats(self, base: str, head: str) -> DiffTotals:
        """Line totals of the changes on head since it forked from base."""
        return parse_numstat(self.run("diff", "--numstat", f"{base}...{head}"))

    def working_tree_diff_stats(self) -> DiffTotals:
        """Line totals of uncommitted changes to tracked files."""
        return parse_numstat(self.run("diff", "--numstat", "HEAD"))

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        """Check if `ancestor` is reachable from `descendant`.

        Exit code 1 means "not an ancestor"; any other failure is raised.
        """
        try:
            self.run("merge-base", "--is-ancestor", ancestor, descendant)
            return True
        except GitQueryError as e:
            if e.exit_code == 1:
                return False
            raise

    def tree_id(self, ref: str) -> str:
        """Get the tree object id of a ref's commit."""
        return self.run("rev-parse", f"{ref}^{{tree}}").strip()

    def merge_tree(self, target: str, branch: str) -> Optional[str]:
        """Simulate merging `branch` into `target` without touching any checkout.

        Returns:
            The merged tree id, or None if the merge would conflict
        """
        try:
            output = self.run("merge-tree", "--write-tree", target, branch)
        except GitQueryError as e:
            if e.exit_code == 1:
                return None
            raise
        return output.splitlines()[0].strip()

    # -- Branches ---------------------------------------------------------

    def upstream_branch(self, branch: str) -> Optional[str]:
        """Get a branch's configured upstream (e.g. "origin/feature"), if any."""
        try:
            upstream = self.run(
                "rev-parse", "--abbrev-ref", "--symbolic-full-name", f"{branch}@{{upstream}}"
            ).strip()
        except GitQueryError as e:
            logger.debug(f"No upstream for {branch}: {e.stderr}")
            return None
        return upstream or None

    def local_branches(self) -> List[str]:
        """List local branch names."""
        output = self.run("for-each-ref", "--format=%(refname:short)", "refs/heads/")
        return [line.strip() for line in output.splitlines() if line.strip()]

    def branch_exists(self, branch: str) -> bool:
        try:
            self.run("rev-parse", "--verify", "--quiet", f"refs/heads/{branch}")
            return True
        except GitQueryError as e:
            if e.exit_code == 1:
                return False
            raise

    def default_branch(self) -> Optional[str]:
        """Guess the repository's default branch.

        Uses the remote HEAD when one is configured, otherwise the first
        existing of main/master.
        """
        try:
            remote_head = self.run(
                "symbolic-ref", "--quiet", "--short", "refs/remotes/origin/HEAD"
            ).strip()
            if remote_head:
                name = remote_head.split("/", 1)[1] if "/" in remote_head else remote_head
                if self.branch_exists(name):
                    return name
        except GitQueryError as e:
            logger.debug(f"No remote HEAD: {e.stderr}")

        for candidate in ("main", "master"):
            if self.branch_exists(candidate):
                return candidate
        return None

    # -- Worktrees --------------------------------------------------------

    def worktree_list_porcelain(self) -> str:
        return self.run("worktree", "list", "--porcelain")

    def worktree_root(self) -> str:
        """Get the top-level directory of the worktree containing `path`."""
        return self.run("rev-parse", "--show-toplevel").strip()

    def status_porcelain(self) -> str:
        return self.run("status", "--porcelain")

    def worktree_state(self) -> Optional[str]:
        """Name of the operation in progress in this worktree, if any."""
        git_dir = self.run("rev-parse", "--git-dir").strip()
        if not os.path.isabs(git_dir):
            git_dir = os.path.join(self.path, git_dir)
        for marker, state in WORKTREE_STATE_MARKERS:
            if os.path.exists(os.path.join(git_dir, marker)):
                return state
        return None

    # -- Mutations --------------------------------------------------------

    def remove_worktree(self, path: str, force: bool = False) -> None:
        args = ["worktree", "remove", path]
        if force:
            args.append("--force")
        self.run(*args)
        logger.info(f"Removed worktree at {path}")

    def prune_worktrees(self) -> None:
        """Drop metadata of worktrees whose directory no longer exists."""
        self.run("worktree", "prune")
        logger.info("Pruned orphaned worktree metadata")

    def delete_branch(self, branch: str, force: bool = False) -> None:
        self.run("branch", "-D" if force else "-d", branch)
        logger.info(f"Deleted branch {branch}")

    def spawn_background(self, commands: Sequence[Sequence[str]]) -> int:
        """Run git commands one after another in a detached process.

        Each command only runs if the previous one succeeded. The process
        outlives this one; its output is discarded.

        Returns:
            PID of the spawned shell
        """
        script = " && ".join(
            " ".join(shlex.quote(arg) for arg in ["git", "-C", self.path, *command])
            for command in commands
        )
        logger.debug(f"Spawning background removal: {script}")
        process = Popen(
            ["sh", "-c", script],
            stdin=DEVNULL,
            stdout=DEVNULL,
            stderr=DEVNULL,
            start_new_session=True,
        )
        return process.pid
