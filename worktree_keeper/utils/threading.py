"""Threading utilities for sizing the enrichment worker pool."""

import os
import sys
from typing import Dict, Any, Optional


def is_free_threading_enabled() -> bool:
    """Detect if Python is running with free-threading enabled.

    Returns:
        True if running on Python 3.13+ with GIL disabled (free-threading mode)
        False if running with GIL enabled or Python < 3.13
    """
    # sys._is_gil_enabled() returns False when GIL is disabled (Python 3.13+)
    is_gil_enabled = getattr(sys, "_is_gil_enabled", None)
    return is_gil_enabled is not None and not is_gil_enabled()


def get_python_threading_mode() -> str:
    """Get a description of the current threading mode."""
    if not hasattr(sys, "_is_gil_enabled"):
        return "GIL-enabled (Python < 3.13)"
    return "free-threading" if is_free_threading_enabled() else "GIL-enabled"


def get_optimal_worker_count(user_specified: Optional[int] = None) -> int:
    """Calculate the worker count for git query fan-out.

    Each unit of work mostly waits on a git subprocess, so the pool is sized
    for I/O-bound work rather than CPU count alone.

    Args:
        user_specified: User-specified worker count, if provided

    Returns:
        Number of workers for parallel processing
    """
    if user_specified is not None and user_specified > 0:
        return user_specified

    cpu_count = os.cpu_count() or 1

    if is_free_threading_enabled():
        # Cap at 64 to avoid excessive overhead
        return min(64, cpu_count * 2)

    # CPU_count + 4 is the usual heuristic for I/O-bound work
    return min(32, cpu_count + 4)


def get_threading_info() -> Dict[str, Any]:
    """Get information about the Python threading configuration.

    Returns:
        Dictionary containing threading mode, worker count, and other details
    """
    return {
        "mode": get_python_threading_mode(),
        "free_threading": is_free_threading_enabled(),
        "cpu_count": os.cpu_count() or 1,
        "optimal_workers": get_optimal_worker_count(),
        "python_version": f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
    }
