"""
worktree-keeper - List git worktrees with rich status and remove them safely
"""

from .__version__ import __version__
from .core import WorktreeKeeper
from .cli.main import main

__all__ = ["WorktreeKeeper", "main", "__version__"]
