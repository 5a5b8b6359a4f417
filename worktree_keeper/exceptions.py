"""Custom exceptions for worktree-keeper"""

from typing import Optional, Sequence


class WorktreeKeeperError(Exception):
    """Base exception for all worktree-keeper errors."""
    pass


class GitQueryError(WorktreeKeeperError):
    """Exception raised when a git invocation fails.

    Carries the raw diagnostic text so callers can surface it unchanged.
    """

    def __init__(
        self,
        args: Sequence[str],
        exit_code: Optional[int] = None,
        stderr: Optional[str] = None,
    ):
        self.git_args = list(args)
        self.exit_code = exit_code
        self.stderr = (stderr or "").strip()

        command = "git " + " ".join(self.git_args)
        if exit_code is not None:
            error_msg = f"'{command}' failed (exit {exit_code})"
        else:
            error_msg = f"'{command}' could not be run"
        if self.stderr:
            error_msg += f": {self.stderr}"

        super().__init__(error_msg)


class AmbiguousTargetError(WorktreeKeeperError):
    """Exception raised when a removal target resolves to zero or several candidates."""

    def __init__(self, target: str, candidates: Optional[Sequence[str]] = None):
        self.target = target
        self.candidates = list(candidates or [])

        if self.candidates:
            error_msg = (
                f"'{target}' is ambiguous, it matches: {', '.join(self.candidates)}"
            )
        else:
            error_msg = f"No worktree or branch found for '{target}'"

        super().__init__(error_msg)


class RemovalBlockedError(WorktreeKeeperError):
    """Exception raised when a guard refuses to remove a target."""

    PRIMARY_WORKTREE = "primary-worktree"
    UNCOMMITTED_CHANGES = "uncommitted-changes"

    def __init__(self, target: str, reason: str, message: Optional[str] = None):
        self.target = target
        self.reason = reason
        self.message = message

        if reason == self.PRIMARY_WORKTREE:
            error_msg = "Cannot remove the primary worktree"
        elif reason == self.UNCOMMITTED_CHANGES:
            error_msg = f"Worktree for '{target}' has uncommitted changes"
        else:
            error_msg = f"Removal of '{target}' is blocked"
        if message:
            error_msg += f": {message}"

        super().__init__(error_msg)
