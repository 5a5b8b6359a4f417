"""Date and time formatting utilities."""

import time
from typing import Optional


def format_age(timestamp: int, now: Optional[float] = None) -> str:
    """
    Format the time since a commit as a short relative age.

    Args:
        timestamp: Commit time in seconds since the epoch
        now: Reference time (defaults to the current time)

    Returns:
        Age such as "5m", "3h", "12d", "4w" or "2y"

    Example:
        format_age(now - 90) == "1m"
    """
    if not timestamp:
        return ""
    now = time.time() if now is None else now
    seconds = max(0, int(now - timestamp))

    if seconds < 60:
        return "now"
    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes}m"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h"
    days = hours // 24
    if days < 14:
        return f"{days}d"
    if days < 365:
        return f"{days // 7}w"
    return f"{days // 365}y"
