"""Core functionality for worktree-keeper"""

from contextlib import nullcontext
from typing import List, Optional, Union

from rich.console import Console

from worktree_keeper.config import Config
from worktree_keeper.exceptions import GitQueryError, WorktreeKeeperError
from worktree_keeper.models import ListItem, RemovalResult
from worktree_keeper.services.display_service import DisplayService
from worktree_keeper.services.enrichment_service import EnrichmentPipeline
from worktree_keeper.services.git import GitRepository
from worktree_keeper.services.git.worktrees import canonical_path
from worktree_keeper.services.removal_service import RemovalService
from worktree_keeper.utils.threading import get_optimal_worker_count
from worktree_keeper.logging_config import get_logger

console = Console()
logger = get_logger(__name__)


class WorktreeKeeper:
    """Main class for listing and removing worktrees."""

    def __init__(self, repo_path: str, config: Union[Config, dict], cwd: Optional[str] = None):
        """Initialize WorktreeKeeper.

        Args:
            repo_path: Path to any worktree of the repository
            config: Configuration dict or Config object
            cwd: Directory removal targets are resolved against (defaults to repo_path)

        Raises:
            WorktreeKeeperError: repo_path is not inside a git repository
        """
        self.repo_path = repo_path
        if isinstance(config, dict):
            self.config = Config.from_dict(config)
        else:
            self.config = config
        self.verbose = self.config.get("verbose", False)
        self.debug_mode = self.config.get("debug", False)

        self.repo = GitRepository(repo_path)
        try:
            self.repo.run("rev-parse", "--git-dir")
        except GitQueryError as e:
            raise WorktreeKeeperError(f"Error initializing repository: {e}") from e

        self.enrichment = EnrichmentPipeline(self.repo, self.config)
        self.removal_service = RemovalService(self.repo, self.config, cwd or repo_path)
        self.display_service = DisplayService(verbose=self.verbose, debug=self.debug_mode)

    def _show_progress(self) -> bool:
        # Spinners would interleave with machine-readable output and debug logs
        return self.config.get("output_format") == "table" and not self.debug_mode

    def list_items(self) -> List[ListItem]:
        """Enrich all worktrees (and branches, if configured), newest first."""
        if self.config.get("sequential", False):
            task_desc = "Reading worktrees..."
        else:
            workers = get_optimal_worker_count(self.config.get("workers"))
            task_desc = f"Reading worktrees ({workers} workers)..."

        status_context = (
            console.status(f"[bold blue]{task_desc}", spinner="dots")
            if self._show_progress()
            else nullcontext()
        )
        with status_context:
            return self.enrichment.collect(self.config.get("include_branches", False))

    def show(self) -> int:
        """List worktrees in the configured output format.

        Returns:
            Process exit code
        """
        items = self.list_items()
        self.display_service.display_items(
            items,
            self.config.get("output_format", "table"),
            current_path=self.current_worktree_path(),
        )
        return 0

    def current_worktree_path(self) -> Optional[str]:
        """Root of the worktree we were started in, or None (e.g. in a bare repository)."""
        try:
            return canonical_path(self.repo.worktree_root())
        except GitQueryError as e:
            logger.debug(f"Not inside a worktree: {e}")
            return None

    def remove(self, targets: List[str]) -> List[RemovalResult]:
        """Remove each target; an empty list means the current worktree."""
        return self.removal_service.remove(targets)

    def run_remove(self, targets: List[str]) -> int:
        """Remove targets and report the outcome of each.

        Returns:
            0 if every target succeeded, 1 if any was blocked or failed
        """
        results = self.remove(targets)
        self.display_service.display_removal_results(results, self.config.get("output_format", "table"))
        return max((result.exit_code for result in results), default=0)

