"""Configuration handling for worktree-keeper"""

from dataclasses import dataclass, fields
from typing import Optional


OUTPUT_FORMATS = ["table", "json"]


@dataclass
class Config:
    """Configuration for worktree-keeper with validation."""

    # Base branch used for ahead/behind and integration checks (None = auto-detect)
    main_branch: Optional[str] = None

    # Listing
    include_branches: bool = False
    output_format: str = "table"  # table, json
    check_integration: bool = False

    # Removal
    force: bool = False  # Remove worktrees with uncommitted changes
    force_delete: bool = False  # Delete branches without the integration check
    delete_branch: bool = True
    background: bool = True

    # Execution modes
    verbose: bool = False
    debug: bool = False
    sequential: bool = False  # Force sequential processing (disable parallelism)
    workers: Optional[int] = None  # Number of parallel workers (None = auto-detect)

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_main_branch()
        self._validate_output_format()
        self._validate_workers()

    def _validate_main_branch(self):
        """Validate main_branch is either unset or a non-empty name."""
        if self.main_branch is None:
            return
        if not self.main_branch.strip():
            raise ValueError("main_branch cannot be empty")
        self.main_branch = self.main_branch.strip()

    def _validate_output_format(self):
        """Validate output_format is one of allowed values."""
        if self.output_format not in OUTPUT_FORMATS:
            raise ValueError(
                f"output_format must be one of {OUTPUT_FORMATS}, got '{self.output_format}'"
            )

    def _validate_workers(self):
        """Validate workers is positive when given."""
        if self.workers is not None and self.workers <= 0:
            raise ValueError(f"workers must be positive, got {self.workers}")

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def get(self, key: str, default=None):
        """Get config value by key."""
        return getattr(self, key, default)

    @classmethod
    def from_dict(cls, config_dict: dict) -> "Config":
        """Create Config from dictionary, ignoring unknown keys."""
        known_fields = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in config_dict.items() if k in known_fields}
        return cls(**filtered)
